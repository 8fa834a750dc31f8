from langchain_core.prompts import ChatPromptTemplate


DATASET_SUMMARY_TEMPLATE = ChatPromptTemplate.from_messages([
    ("system", """You are an expert data analyst. Given a statistical profile of an uploaded dataset and a few sample records, write a concise summary for the person who uploaded it.

Your summary should include:
1. What the dataset appears to contain
2. The key columns, fields or themes and their inferred types
3. Data quality observations (missing values, low cardinality, mixed types)
4. Analyses the dataset would be suitable for

Only rely on the numbers in the profile. Do not invent columns or values."""),
    ("user", """File Type: {file_type}

Profile:
{profile}

Sample Records:
{sample_rows}

Please summarize this dataset.""")
])
