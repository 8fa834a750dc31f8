from fastapi import APIRouter, Query

from datalens.models.conversation import (
    ChatRequest,
    ChatResponse,
    ConversationCreate,
    ConversationListResponse,
    ConversationUpdate,
)
from datalens.services.chat import chat_with_ai
from datalens.services.storage import (
    create_conversation,
    delete_conversation,
    get_conversation,
    list_user_conversations,
    total_pages,
    update_conversation,
)

router = APIRouter(prefix="/conversations", tags=["Conversations"])


# ---------------- GET ROUTES ----------------

@router.get("/user/{uid}", response_model=ConversationListResponse)
def get_user_conversations(
    uid: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    conversations, total = list_user_conversations(uid, page=page, limit=limit)
    return ConversationListResponse(
        conversations=conversations,
        page=page,
        limit=limit,
        total=total,
        pages=total_pages(total, limit),
    )


@router.get("/{conversation_id}")
def get_single_conversation(conversation_id: str, uid: str = Query(...)):
    return {"conversation": get_conversation(conversation_id, uid)}


# ---------------- PUT / POST / DELETE ROUTES ----------------

@router.post("", status_code=201)
def create_new_conversation(request: ConversationCreate, uid: str = Query(...)):
    conversation = create_conversation(
        uid,
        title=request.title,
        settings=request.settings.model_dump(),
        tags=request.tags,
    )
    return {"conversation": conversation}


@router.put("/{conversation_id}")
def update_single_conversation(conversation_id: str, changes: ConversationUpdate, uid: str = Query(...)):
    return {"conversation": update_conversation(conversation_id, uid, changes.model_dump())}


@router.post("/{conversation_id}/chat", response_model=ChatResponse)
def chat(conversation_id: str, request: ChatRequest, uid: str = Query(...)):
    return chat_with_ai(conversation_id, uid, request.message)


@router.delete("/{conversation_id}")
def delete_single_conversation(conversation_id: str, uid: str = Query(...)):
    delete_conversation(conversation_id, uid)
    return {"message": "Conversation deleted"}
