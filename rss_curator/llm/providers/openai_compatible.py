"""OpenAI-compatible chat completions provider (Venice.ai by default)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import ApiError, ParseError, TransportError
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span
from .base import RewriteProvider

INVALID_RESPONSE = "Invalid API Response"


class OpenAICompatibleProvider(RewriteProvider):
    """Posts a system + user message pair to ``<base_url>/chat/completions``.

    One request per call, no retry. Transport failures, non-200 responses
    and malformed 200 responses map to TransportError, ApiError and
    ParseError respectively.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        log_cfg: LoggingConfig | None = None,
        llm_logger: logging.Logger | None = None,
        client: httpx.Client | None = None,
    ):
        self.cfg = cfg
        self.log_cfg = log_cfg or LoggingConfig()
        self.llm_logger = llm_logger
        self.client = client

    @property
    def endpoint(self) -> str:
        return f"{self.cfg.base_url.rstrip('/')}/chat/completions"

    def build_payload(self, content: str, system_prompt: str) -> dict[str, Any]:
        return {
            "model": self.cfg.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": content},
            ],
            "temperature": self.cfg.temperature,
            "max_tokens": self.cfg.max_tokens,
        }

    def rewrite(self, content: str, system_prompt: str, credential: str) -> str:
        payload = self.build_payload(content, system_prompt)
        with start_span(
            "rewrite.chat_completion",
            kind="llm",
            input_value=payload["messages"],
            attributes={"llm.model": self.cfg.model, "llm.provider": self.cfg.name},
        ) as span:
            try:
                data = self._post(payload, credential)
                text = _extract_text(data)
            except (TransportError, ApiError, ParseError) as exc:
                record_span_error(span, exc)
                self._log_llm_response(exc.kind, str(exc), system_prompt, content)
                raise
            set_span_output(span, text)
            self._log_llm_response("ok", text, system_prompt, content)
            return text

    def _post(self, payload: dict[str, Any], credential: str) -> dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }
        try:
            if self.client is not None:
                resp = self.client.post(
                    self.endpoint, json=payload, headers=headers, timeout=self.cfg.timeout_seconds
                )
            else:
                with httpx.Client(
                    timeout=self.cfg.timeout_seconds, trust_env=self.cfg.trust_env
                ) as client:
                    resp = client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        body = _json_or_none(resp)
        if resp.status_code != 200:
            raise ApiError(_error_message(body, resp.status_code), status_code=resp.status_code)
        if not isinstance(body, dict):
            raise ParseError(INVALID_RESPONSE)
        return body

    def _log_llm_response(self, status: str, content: str, prompt: str, user_content: str) -> None:
        if self.llm_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_rewrite_response",
            "status": status,
            "model": self.cfg.model,
            "input_chars": len(user_content),
            "raw_response": truncate_text(redact_text(content, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
            payload["raw_input"] = truncate_text(redact_text(user_content, redaction))
        log_event(self.llm_logger, "LLM response", **payload)


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _error_message(body: Any, status_code: int) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return f"API Error ({status_code})"


def _extract_text(data: dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError(INVALID_RESPONSE) from exc
    if content is None:
        raise ParseError(INVALID_RESPONSE)
    return str(content)
