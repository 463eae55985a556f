"""
Document Analyst - Chat UI

Streamlit application for uploading a document and asking questions about it.
"""

import asyncio
import logging
import os

import streamlit as st
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from docanalyst.config import Config
from docanalyst.extraction import SUPPORTED_EXTENSIONS, ParsingError, format_file_size
from docanalyst.analysis import (
    AnalysisRequestError,
    AnalysisResult,
    DocumentAnalyst,
    UploadedFile,
)
from docanalyst.utils.llm_client import LLMClientError

# Configure logging
Config.setup_logging()
logger = logging.getLogger(__name__)

# Page config
st.set_page_config(
    page_title="Document Analyst",
    page_icon="📄",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for styling
st.markdown("""
<style>
    .analyst-header {
        background: linear-gradient(135deg, #1e3a5f 0%, #2d5a87 100%);
        padding: 1.5rem 2rem;
        border-radius: 12px;
        margin-bottom: 1.5rem;
        color: white;
    }

    .analyst-header h1 {
        margin: 0;
        font-size: 2rem;
        font-weight: 700;
        letter-spacing: -0.5px;
    }

    .analyst-header p {
        margin: 0.5rem 0 0 0;
        opacity: 0.9;
        font-size: 1.05rem;
    }

    .file-chip {
        display: inline-block;
        background-color: #f1f5f9;
        border: 1px solid #e2e8f0;
        border-radius: 9999px;
        padding: 0.2rem 0.75rem;
        font-size: 0.8rem;
        color: #334155;
        margin-bottom: 0.4rem;
    }
</style>
""", unsafe_allow_html=True)


# Initialize session state
def init_session_state():
    """Initialize session state variables."""
    if "messages" not in st.session_state:
        # [{"role": "user" | "assistant", "content": str, "file": str | None}]
        st.session_state.messages = []
    if "processing" not in st.session_state:
        st.session_state.processing = False


init_session_state()


async def run_analysis(message: str | None, upload: UploadedFile | None) -> AnalysisResult:
    """Run one analysis request with a fresh analyst."""
    analyst = DocumentAnalyst()
    try:
        return await analyst.analyze(message, upload)
    finally:
        await analyst.close()


def render_header():
    """Render the page header."""
    st.markdown("""
    <div class="analyst-header">
        <h1>📄 Document Analyst</h1>
        <p>Upload a PDF, CSV or Excel file and ask questions about it</p>
    </div>
    """, unsafe_allow_html=True)


def render_sidebar() -> UploadedFile | None:
    """Render the sidebar with upload and controls."""
    upload = None

    with st.sidebar:
        st.header("📁 Document Upload")

        uploaded_file = st.file_uploader(
            "Upload a PDF, CSV or Excel file",
            type=list(SUPPORTED_EXTENSIONS),
            accept_multiple_files=False,
            help=f"Maximum size {Config.MAX_UPLOAD_SIZE_MB}MB",
            key="file_uploader",
        )

        if uploaded_file is not None:
            if uploaded_file.size > Config.max_upload_size_bytes():
                st.error(f"File size must be less than {Config.MAX_UPLOAD_SIZE_MB}MB")
            else:
                upload = UploadedFile.from_bytes(
                    uploaded_file.name,
                    uploaded_file.getvalue(),
                    uploaded_file.type or "",
                )
                st.caption(f"**{uploaded_file.name}** ({format_file_size(uploaded_file.size)})")

        st.divider()

        if st.button("🗑️ Clear Chat", use_container_width=True):
            st.session_state.messages = []
            st.rerun()

        # API Status
        st.divider()
        st.header("🔌 API Status")

        if os.getenv("OPENROUTER_API_KEY"):
            st.success("OpenRouter: Connected")
        else:
            st.warning("OpenRouter: No API key")

        if os.getenv("GROQ_API_KEY"):
            st.success("Groq: Connected")
        else:
            st.info("Groq: Not configured")

        st.caption(f"Model: {Config.DEFAULT_ANALYSIS_MODEL}")

    return upload


def render_messages():
    """Render the chat history."""
    if not st.session_state.messages:
        st.info("Upload a document in the sidebar, then ask a question or send it for a general analysis.")

    for entry in st.session_state.messages:
        with st.chat_message(entry["role"]):
            if entry.get("file"):
                st.markdown(f'<span class="file-chip">📎 {entry["file"]}</span>', unsafe_allow_html=True)
            st.markdown(entry["content"])


def handle_submission(message: str, upload: UploadedFile | None):
    """Send a message (and the current upload, if any) to the analyst."""
    file_name = upload.descriptor.name if upload else None
    st.session_state.messages.append({
        "role": "user",
        "content": message or "_Analyze this document_",
        "file": file_name,
    })

    with st.chat_message("user"):
        if file_name:
            st.markdown(f'<span class="file-chip">📎 {file_name}</span>', unsafe_allow_html=True)
        st.markdown(message or "_Analyze this document_")

    with st.chat_message("assistant"):
        st.session_state.processing = True
        with st.spinner("Analyzing..."):
            # Run async processing
            loop = asyncio.new_event_loop()
            try:
                result = loop.run_until_complete(run_analysis(message or None, upload))
                reply = result.response
            except (AnalysisRequestError, ParsingError) as e:
                reply = f"❌ {e}"
            except LLMClientError as e:
                reply = "❌ Failed to generate response"
                logger.error(f"LLM error: {e}")
            finally:
                loop.close()
                st.session_state.processing = False

        st.markdown(reply)

    st.session_state.messages.append({"role": "assistant", "content": reply, "file": None})


def main():
    """Main application entry point."""
    render_header()

    upload = render_sidebar()
    render_messages()

    config_issues = Config.validate()
    if config_issues:
        st.warning("Configuration incomplete: " + "; ".join(config_issues))

    prompt = st.chat_input(
        "Ask a question about your document..." if upload else "Type a message...",
        disabled=st.session_state.processing,
    )

    if prompt is not None:
        handle_submission(prompt.strip(), upload)
    elif upload is not None and st.sidebar.button("🔍 Analyze Document", type="primary", use_container_width=True):
        handle_submission("", upload)


if __name__ == "__main__":
    main()
