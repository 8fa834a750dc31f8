import logging
import time
from datetime import datetime
from typing import Dict, List, Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from datalens.constants.stat import llm
from datalens.exceptions import AIServiceError
from datalens.services.storage import append_messages, get_conversation

logger = logging.getLogger(__name__)

ROLE_MESSAGES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def build_chat_messages(conversation: Dict[str, Any], message: str) -> List[BaseMessage]:
    """System prompt, then the stored history, then the new user turn"""
    settings = conversation.get("settings") or {}
    messages: List[BaseMessage] = []
    if settings.get("system_prompt"):
        messages.append(SystemMessage(content=settings["system_prompt"]))
    for item in conversation.get("messages", []):
        messages.append(ROLE_MESSAGES[item["role"]](content=item["content"]))
    messages.append(HumanMessage(content=message))
    return messages


def chat_with_ai(conversation_id: str, uid: str, message: str) -> Dict[str, Any]:
    """Send one user turn through the LLM and store both sides of the exchange"""
    conversation = get_conversation(conversation_id, uid)
    settings = conversation.get("settings") or {}
    user_message = {"role": "user", "content": message, "timestamp": datetime.utcnow()}

    start = time.perf_counter()
    try:
        model = llm.bind(
            temperature=settings.get("temperature", 0.7),
            max_tokens=settings.get("max_tokens", 1000),
        )
        response = model.invoke(build_chat_messages(conversation, message))
    except Exception as e:
        logger.error("Chat completion failed for conversation %s", conversation_id, exc_info=True)
        raise AIServiceError(f"AI service error: {e}") from e
    processing_time = time.perf_counter() - start

    usage = getattr(response, "usage_metadata", None) or {}
    tokens = usage.get("total_tokens", 0)
    reply = {
        "role": "assistant",
        "content": response.content,
        "timestamp": datetime.utcnow(),
        "metadata": {
            "model": settings.get("model"),
            "tokens": tokens,
            "processing_time": processing_time,
        },
    }

    updated = append_messages(conversation_id, uid, [user_message, reply], tokens=tokens)
    logger.info("Conversation %s: reply of %d tokens in %.2fs", conversation_id, tokens, processing_time)
    return {"reply": response.content, "conversation": updated}
