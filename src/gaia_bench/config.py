"""Configuration data models for the GAIA benchmark harness."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class DatasetSplit(str, Enum):
    VALIDATION = "validation"
    TEST = "test"


class Category(str, Enum):
    FILES = "files"
    CODE = "code"
    SEARCH = "search"
    BROWSER = "browser"
    REASONING = "reasoning"


class ReflectionStyle(str, Enum):
    BASIC = "basic"
    DETAILED = "detailed"
    QUICK = "quick"


class SearchProvider(str, Enum):
    TAVILY = "tavily"
    EXA = "exa"


class SandboxProvider(str, Enum):
    E2B = "e2b"
    SANDOCK = "sandock"


class BrowserProvider(str, Enum):
    STEEL = "steel"
    BROWSERUSE = "browseruse"
    AWS_AGENTCORE = "aws-bedrock-agentcore"


class MemoryProvider(str, Enum):
    MEM0 = "mem0"
    AGENTCORE = "agentcore"


DEFAULT_INSTRUCTIONS = (
    "You are a highly capable AI assistant designed to solve complex tasks "
    "from the GAIA benchmark. Break complex problems into smaller steps and "
    "think step by step.\n\n"
    "CRITICAL: When providing your final answer, be EXTREMELY CONCISE. "
    "Provide ONLY the direct answer with no explanation, no introduction and "
    "no reasoning. For \"What year was X founded?\" answer \"1927\", not "
    "\"The answer is 1927 because...\"."
)


class AgentConfig(BaseModel):
    provider: str = "openai"
    model: str = Field(default_factory=lambda: os.environ.get("OPENAI_MODEL", "gpt-4o"))
    base_url: str | None = None
    api_key: str | None = None
    max_tokens: int = 4096
    temperature: float = 0.0
    system_prompt: str = DEFAULT_INSTRUCTIONS


class ProviderSelection(BaseModel):
    """Tool providers the agent was configured with, keyed by capability."""
    search: SearchProvider = SearchProvider.TAVILY
    sandbox: SandboxProvider = SandboxProvider.E2B
    browser: BrowserProvider = BrowserProvider.STEEL
    memory: MemoryProvider = MemoryProvider.MEM0

    @classmethod
    def from_env(cls) -> ProviderSelection:
        """Resolve providers from GAIA_AGENT_*_PROVIDER, ignoring unknown values."""
        selected = {}
        for capability, enum_cls in (
            ("search", SearchProvider),
            ("sandbox", SandboxProvider),
            ("browser", BrowserProvider),
            ("memory", MemoryProvider),
        ):
            raw = os.environ.get(f"GAIA_AGENT_{capability.upper()}_PROVIDER", "").lower()
            if raw in {p.value for p in enum_cls}:
                selected[capability] = enum_cls(raw)
        return cls(**selected)

    def summary_text(self) -> str:
        return (
            f"Search: {self.search.value}, Sandbox: {self.sandbox.value}, "
            f"Browser: {self.browser.value}"
        )


class BenchmarkConfig(BaseModel):
    """Configuration for a benchmark run."""
    dataset: DatasetSplit = DatasetSplit.VALIDATION
    level: int | None = Field(default=None, ge=1, le=3)
    category: Category | None = None
    limit: int | None = Field(default=None, ge=1)
    random: bool = False
    seed: int | None = None
    stream: bool = False
    verbose: bool = False
    resume: bool = False
    reflection: bool = False
    reflection_style: ReflectionStyle = ReflectionStyle.BASIC
    max_reflections: int = 15
    output_dir: str = "benchmark-results"
    delay_seconds: float = 1.0
    poll_interval_seconds: float = 0.5
    agent: AgentConfig = Field(default_factory=AgentConfig)
    providers: ProviderSelection = Field(default_factory=ProviderSelection.from_env)


def load_config(path: str | Path) -> BenchmarkConfig:
    """Load benchmark config from YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return BenchmarkConfig(**data)
