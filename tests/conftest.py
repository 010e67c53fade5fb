"""
Shared fixtures for readerlens tests
"""

import os
import sys
import tempfile
import json
from typing import Callable, List

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Keep log files out of the working tree
os.environ.setdefault("READERLENS_LOG_DIR", tempfile.mkdtemp(prefix="readerlens-logs-"))

from readerlens.config.settings import LLMSettings, Provider
from readerlens.llm.gateway import LLMGateway


# ============ SAMPLE DATA FIXTURES ============

ANALYSIS_JSON = {
    "theme": "远程办公对团队协作的影响",
    "tone": "正式",
    "targetAudience": "企业管理者",
    "suggestedReaders": [
        {"name": "严苛的学术导师", "description": "关注论证是否严谨"},
        {"name": "挑剔的投资人", "description": "关注商业价值"},
        {"name": "普通的吃瓜群众", "description": "关注是否有趣易懂"},
    ],
}

FEEDBACK_JSON = {
    "firstImpressionScore": 7,
    "firstImpressionReason": "结构清晰，但论据单薄",
    "readingFeeling": "读起来**很顺**，但第二节跳跃。",
    "revisionSuggestions": "1. 补充数据来源\n2. 合并重复段落",
}


@pytest.fixture
def analysis_json() -> dict:
    return json.loads(json.dumps(ANALYSIS_JSON))


@pytest.fixture
def feedback_json() -> dict:
    return dict(FEEDBACK_JSON)


@pytest.fixture
def settings() -> LLMSettings:
    """Settings with only a DeepSeek key."""
    return LLMSettings(deepseek_api_key="test-deepseek-key")


@pytest.fixture
def all_keys_settings() -> LLMSettings:
    return LLMSettings(
        deepseek_api_key="test-deepseek-key",
        openai_api_key="test-openai-key",
        anthropic_api_key="test-anthropic-key",
    )


class StubClient:
    """Provider client returning canned replies and recording prompts."""

    def __init__(self, replies: List, model: str = "stub-model"):
        self.replies = list(replies)
        self.model = model
        self.calls = []

    async def complete(self, system_prompt, user_prompt, model=None, temperature=None, max_tokens=4096):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def make_gateway() -> Callable:
    """Build (gateway, stub_client, chosen_providers) around canned replies."""

    def _make(*replies, settings: LLMSettings = None):
        client = StubClient(replies)
        chosen = []

        def factory(choice, _settings):
            chosen.append(choice.provider)
            return client

        gw = LLMGateway(settings or LLMSettings(deepseek_api_key="test-key"), client_factory=factory)
        return gw, client, chosen

    return _make


@pytest.fixture
def docx_bytes() -> Callable:
    """Build a .docx file in memory from paragraphs."""
    import io
    import docx

    def _build(*paragraphs: str, table: List[List[str]] = None) -> bytes:
        document = docx.Document()
        for text in paragraphs:
            document.add_paragraph(text)
        if table:
            t = document.add_table(rows=len(table), cols=len(table[0]))
            for r, row in enumerate(table):
                for c, value in enumerate(row):
                    t.cell(r, c).text = value
        buf = io.BytesIO()
        document.save(buf)
        return buf.getvalue()

    return _build


@pytest.fixture
def pdf_bytes() -> Callable:
    """Build a PDF in memory with one page per text."""
    import fitz

    def _build(*pages: str) -> bytes:
        doc = fitz.open()
        for text in pages:
            page = doc.new_page()
            if text:
                page.insert_text((72, 72), text)
        data = doc.tobytes()
        doc.close()
        return data

    return _build
