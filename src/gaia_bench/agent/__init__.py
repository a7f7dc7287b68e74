"""Agent adapters, selected by provider key."""

from gaia_bench.config import AgentConfig

from .base import Agent, AgentOutput, AgentStream, StepRecord, ToolCall, ToolResult


def create_agent(config: AgentConfig) -> Agent:
    """Create the agent under benchmark from config."""
    provider = config.provider

    if provider == "anthropic":
        from .anthropic import AnthropicAgent
        return AnthropicAgent(
            model=config.model,
            system_prompt=config.system_prompt,
            api_key=config.api_key,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )

    if provider in ("openai", "vllm", "local"):
        from .openai_compat import OpenAIChatAgent
        return OpenAIChatAgent(
            model=config.model,
            system_prompt=config.system_prompt,
            base_url=config.base_url,
            api_key=config.api_key,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
        )

    raise ValueError(f"Unknown agent provider: {provider}")


__all__ = [
    "Agent",
    "AgentOutput",
    "AgentStream",
    "StepRecord",
    "ToolCall",
    "ToolResult",
    "create_agent",
]
