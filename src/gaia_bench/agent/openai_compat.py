"""Single-turn chat agent for OpenAI and OpenAI-compatible servers.

Works against api.openai.com as well as vLLM, ollama and other local
servers that speak the chat completions protocol (set `base_url`).
"""

from __future__ import annotations

import asyncio
import json
import re
import uuid
from typing import Any

from openai import AsyncOpenAI

from .base import Agent, AgentOutput, AgentStream, StepRecord, ToolCall


class OpenAIChatAgent(Agent):
    """Chat completions agent; one request per task, no tool loop."""

    def __init__(
        self,
        model: str,
        system_prompt: str = "",
        base_url: str | None = None,
        api_key: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ):
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = AsyncOpenAI(base_url=base_url, api_key=api_key)

    @property
    def name(self) -> str:
        return "openai-chat"

    async def generate(self, messages: list[dict[str, Any]]) -> AgentOutput:
        response = await self.client.chat.completions.create(**self._request_kwargs(messages))
        message = response.choices[0].message

        text = _strip_thinking(message.content or "")
        step = StepRecord(text=text)
        for tc in message.tool_calls or []:
            try:
                args = json.loads(tc.function.arguments)
            except json.JSONDecodeError:
                args = {"raw": tc.function.arguments}
            step.tool_calls.append(ToolCall(
                tool_name=tc.function.name,
                tool_call_id=tc.id or f"call_{uuid.uuid4().hex[:8]}",
                args=args,
            ))
        return AgentOutput(text=text, steps=[step])

    async def stream(self, messages: list[dict[str, Any]]) -> AgentStream:
        response = await self.client.chat.completions.create(
            **self._request_kwargs(messages), stream=True,
        )
        done: asyncio.Future[list[StepRecord]] = asyncio.get_running_loop().create_future()
        partial_steps: list[StepRecord] = []

        async def text_chunks():
            parts: list[str] = []
            try:
                async for chunk in response:
                    if not chunk.choices:
                        continue
                    delta = chunk.choices[0].delta.content
                    if delta:
                        parts.append(delta)
                        yield delta
            except Exception:
                done.cancel()
                raise
            partial_steps.append(StepRecord(text=_strip_thinking("".join(parts))))
            if not done.done():
                done.set_result(list(partial_steps))

        return AgentStream(text_stream=text_chunks(), steps=done, partial_steps=partial_steps)

    def _request_kwargs(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        oai_messages: list[dict[str, Any]] = []
        if self.system_prompt:
            oai_messages.append({"role": "system", "content": self.system_prompt})
        oai_messages.extend(_convert_message(m) for m in messages)
        return {
            "model": self.model,
            "messages": oai_messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }


def _convert_message(msg: dict[str, Any]) -> dict[str, Any]:
    """Convert a benchmark message to the chat completions format."""
    content = msg.get("content", "")
    if isinstance(content, str):
        return {"role": msg["role"], "content": content}

    parts = []
    for part in content:
        if part.get("type") == "image":
            parts.append({"type": "image_url", "image_url": {"url": part["image"]}})
        else:
            parts.append({"type": "text", "text": part.get("text", "")})
    return {"role": msg["role"], "content": parts}


def _strip_thinking(text: str) -> str:
    """Remove <think>...</think> blocks some local models leave in content."""
    return re.sub(r"<think>.*?</think>\s*", "", text, flags=re.DOTALL).strip()
