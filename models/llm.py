from __future__ import annotations

from typing import Any, Optional

from langchain_core.language_models import BaseLanguageModel
from langchain_ollama import OllamaLLM
from tenacity import Retrying, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from common.config import LLMConfig, secrets, yaml_config
from common.logger import get_logger

log = get_logger(__name__)


def load_local_llm(cfg: Optional[LLMConfig] = None) -> BaseLanguageModel:
    """
    Load the documentation LLM described by the llm section of the config.
    """
    cfg = cfg or yaml_config.llm

    if cfg.provider == "ollama":
        kwargs: dict[str, Any] = {}
        if secrets.ollama_base_url:
            kwargs["base_url"] = secrets.ollama_base_url
        return OllamaLLM(model=cfg.model_name, temperature=cfg.temperature, **kwargs)
    else:
        raise ValueError(f"Unsupported provider: {cfg.provider}")


def _as_text(output: Any) -> str:
    # chat models return messages, plain LLMs return strings
    content = getattr(output, "content", output)
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )
    return str(content or "").strip()


class LLMSummarizer:
    """
    Turns one documentation prompt into Markdown text.

    Calls are not retried unless max_attempts > 1; a failed call raises so the
    caller can decide whether to drop the fragment.
    """

    def __init__(
        self,
        llm: BaseLanguageModel,
        max_attempts: Optional[int] = None,
        wait: Optional[wait_base] = None,
    ):
        self.llm = llm
        self.max_attempts = max_attempts or yaml_config.llm.max_attempts
        self.wait = wait or wait_exponential(multiplier=1, min=1, max=8)

    def summarize(self, prompt: str) -> str:
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    log.warning(
                        "Retrying summarizer call (attempt %d/%d)",
                        attempt.retry_state.attempt_number,
                        self.max_attempts,
                    )
                output = self.llm.invoke(prompt)
        return _as_text(output)
