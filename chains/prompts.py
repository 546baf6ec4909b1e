from langchain_core.prompts import PromptTemplate

SYSTEM_BASE = """You are a professional technical writer for software projects.
Analyze the following code and write **developer documentation** in Markdown."""

CHUNK_DOC_TEMPLATE = PromptTemplate(
    input_variables=["file_path", "part", "total", "code"],
    template=(
        SYSTEM_BASE + "\n\n"
        "Explain clearly:\n"
        "- The overall purpose of this code\n"
        "- Key classes, functions, and parameters\n"
        "- Return values and interactions\n"
        "- Any special logic or dependencies\n"
        "- Example usages if visible\n\n"
        "Keep it professional and concise. Avoid repeating boilerplate.\n\n"
        "### File: {file_path}\n"
        "### Code snippet ({part}/{total})\n"
        "{code}"
    ),
)

DOC_HEADING = "# Documentation for `{file_path}`"

TOO_SMALL_DOC = (
    "# Documentation for {file_path}\n\n"
    "This file is too small to generate documentation."
)
