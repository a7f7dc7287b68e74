"""Single-turn Anthropic Claude agent."""

from __future__ import annotations

import asyncio
from typing import Any

import anthropic

from .base import Agent, AgentOutput, AgentStream, StepRecord, ToolCall, split_data_url


class AnthropicAgent(Agent):
    """Claude messages API agent; one request per task, no tool loop."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-6",
        system_prompt: str = "",
        api_key: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.0,
    ):
        self.model = model
        self.system_prompt = system_prompt
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = anthropic.AsyncAnthropic(api_key=api_key)

    @property
    def name(self) -> str:
        return "anthropic"

    async def generate(self, messages: list[dict[str, Any]]) -> AgentOutput:
        response = await self.client.messages.create(**self._request_kwargs(messages))
        step = _step_from_message(response)
        return AgentOutput(text=step.text, steps=[step])

    async def stream(self, messages: list[dict[str, Any]]) -> AgentStream:
        kwargs = self._request_kwargs(messages)
        done: asyncio.Future[list[StepRecord]] = asyncio.get_running_loop().create_future()
        partial_steps: list[StepRecord] = []

        async def text_chunks():
            try:
                async with self.client.messages.stream(**kwargs) as stream:
                    async for text in stream.text_stream:
                        yield text
                    final = await stream.get_final_message()
            except Exception:
                done.cancel()
                raise
            partial_steps.append(_step_from_message(final))
            if not done.done():
                done.set_result(list(partial_steps))

        return AgentStream(text_stream=text_chunks(), steps=done, partial_steps=partial_steps)

    def _request_kwargs(self, messages: list[dict[str, Any]]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [_convert_message(m) for m in messages],
        }
        if self.system_prompt:
            kwargs["system"] = self.system_prompt
        return kwargs


def _convert_message(msg: dict[str, Any]) -> dict[str, Any]:
    """Convert a benchmark message to Anthropic content blocks."""
    content = msg.get("content", "")
    if isinstance(content, str):
        return {"role": msg["role"], "content": content}

    blocks = []
    for part in content:
        if part.get("type") != "image":
            blocks.append({"type": "text", "text": part.get("text", "")})
            continue
        image = part["image"]
        if image.startswith("data:"):
            media_type, data = split_data_url(image)
            source = {"type": "base64", "media_type": media_type, "data": data}
        else:
            source = {"type": "url", "url": image}
        blocks.append({"type": "image", "source": source})
    return {"role": msg["role"], "content": blocks}


def _step_from_message(message: Any) -> StepRecord:
    """Text and tool_use blocks of a Claude message as one step."""
    step = StepRecord()
    texts = []
    for block in message.content:
        if block.type == "text":
            texts.append(block.text)
        elif block.type == "tool_use":
            step.tool_calls.append(ToolCall(
                tool_name=block.name,
                tool_call_id=block.id,
                args=dict(block.input),
            ))
    step.text = "\n".join(texts)
    return step
