from __future__ import annotations

import pytest
from langchain_core.messages import AIMessage
from tenacity import wait_none

from common.config import LLMConfig
from models.llm import LLMSummarizer, load_local_llm


class FakeLLM:
    def __init__(self, outputs):
        self.outputs = list(outputs)
        self.calls = 0

    def invoke(self, prompt):
        self.calls += 1
        out = self.outputs.pop(0)
        if isinstance(out, Exception):
            raise out
        return out


def test_plain_string_output_is_stripped():
    llm = FakeLLM(["  ## Overview\nDoes things.\n"])
    assert LLMSummarizer(llm).summarize("p") == "## Overview\nDoes things."


def test_chat_message_output_is_unwrapped():
    llm = FakeLLM([AIMessage(content="Explains the parser.")])
    assert LLMSummarizer(llm).summarize("p") == "Explains the parser."


def test_no_retry_by_default():
    llm = FakeLLM([TimeoutError("slow"), "never reached"])

    with pytest.raises(TimeoutError):
        LLMSummarizer(llm, max_attempts=1).summarize("p")
    assert llm.calls == 1


def test_retries_up_to_max_attempts():
    llm = FakeLLM([ConnectionError("a"), ConnectionError("b"), "third time lucky"])

    text = LLMSummarizer(llm, max_attempts=3, wait=wait_none()).summarize("p")

    assert text == "third time lucky"
    assert llm.calls == 3


def test_unsupported_provider_is_rejected():
    with pytest.raises(ValueError):
        load_local_llm(LLMConfig(provider="carrier-pigeon"))
