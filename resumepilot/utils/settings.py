"""
Pipeline settings loading.

Settings are typed dataclasses validated through OmegaConf structured configs.
Values are merged in order (later overrides earlier):

    1. Dataclass defaults below
    2. YAML file (argument, else RESUMEPILOT_CONFIG_PATH, else the packaged pipeline.yaml)
    3. Environment overrides (see ENV_OVERRIDES and LATEX_COMPILER)

Load settings once at process start and pass them into the pipeline:

    >>> settings = load_pipeline_settings()
    >>> async with open_pipeline(settings) as pipeline:
    ...     result = await pipeline.compile(markup)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "pipeline.yaml"

# Environment variable -> settings key
ENV_OVERRIDES = {
    "RESUMEPILOT_ORIGINAL_DEADLINE_S": "original_deadline_s",
    "RESUMEPILOT_SIMPLIFIED_DEADLINE_S": "simplified_deadline_s",
    "RESUMEPILOT_PLAUSIBILITY_FLOOR_BYTES": "plausibility_floor_bytes",
}

ENGINE_KINDS = ("http", "local")
HTTP_METHODS = ("get", "post")


@dataclass
class EngineSpec:
    """
    One typesetting backend.

    Attributes:
        id: Unique engine identifier used in logs and results
        kind: "http" for a remote service, "local" for a TeX binary on this host
        url: Endpoint for http engines
        method: "get" (source in query string) or "post" (form-encoded body)
        command: Compiler selector sent to the service, or the binary for local engines
        text_field: Form/query field carrying the markup
        command_field: Form/query field carrying the command (None to omit it)
        attempt_timeout_s: Per-attempt cap inside a tier (None for the tier budget)
        enabled: Disabled engines are never attempted
    """

    id: str = "???"
    kind: str = "http"
    url: Optional[str] = None
    method: str = "post"
    command: Optional[str] = "pdflatex"
    text_field: str = "text"
    command_field: Optional[str] = "command"
    attempt_timeout_s: Optional[float] = None
    enabled: bool = True


@dataclass
class FallbackLimits:
    """
    Page budget of the fallback renderer.

    Counts cap how many entries of each category are drawn; the thresholds are
    vertical positions in points measured from the top of the page.
    """

    experience: int = 3
    education: int = 2
    projects: int = 3
    achievements: int = 3
    description_chars: int = 200
    bottom_threshold_pt: float = 708.0
    extra_section_chars: int = 200
    extra_section_lines: int = 3


@dataclass
class PipelineSettings:
    original_deadline_s: float = 30.0
    simplified_deadline_s: float = 25.0
    plausibility_floor_bytes: int = 1000
    max_get_url_length: int = 8000
    local_passes: int = 2
    engines: List[EngineSpec] = field(default_factory=list)
    fallback: FallbackLimits = field(default_factory=FallbackLimits)

    @property
    def enabled_engines(self) -> List[EngineSpec]:
        """Engines to attempt, in configured order."""
        return [engine for engine in self.engines if engine.enabled]

    def without_remote_engines(self) -> "PipelineSettings":
        """Copy of these settings with every http engine disabled (offline mode)."""
        config = OmegaConf.structured(self)
        for engine in config.engines:
            if engine.kind == "http":
                engine.enabled = False
        return OmegaConf.to_object(config)


def _validate(settings: PipelineSettings) -> None:
    """Reject settings that would make a tier meaningless."""
    if settings.original_deadline_s <= 0 or settings.simplified_deadline_s <= 0:
        raise ValueError("Tier deadlines must be positive")
    if settings.plausibility_floor_bytes < 0:
        raise ValueError("plausibility_floor_bytes must be >= 0")

    seen = set()
    for engine in settings.engines:
        if engine.id in seen:
            raise ValueError(f"Duplicate engine id: {engine.id}")
        seen.add(engine.id)
        if engine.kind not in ENGINE_KINDS:
            raise ValueError(f"Engine '{engine.id}' has unknown kind '{engine.kind}'")
        if engine.kind == "http":
            if not engine.url:
                raise ValueError(f"HTTP engine '{engine.id}' requires a url")
            if engine.method not in HTTP_METHODS:
                raise ValueError(f"Engine '{engine.id}' has unknown method '{engine.method}'")
        if engine.kind == "local" and not engine.command:
            raise ValueError(f"Local engine '{engine.id}' requires a command")


def _environment_overrides() -> List[str]:
    """Build an OmegaConf dotlist from environment variables."""
    dotlist = [
        f"{key}={os.environ[env_var]}"
        for env_var, key in ENV_OVERRIDES.items()
        if os.getenv(env_var)
    ]
    return dotlist


def _apply_local_compiler(config, compiler: str) -> None:
    """Enable the local engine with the compiler named by LATEX_COMPILER."""
    for engine in config.engines:
        if engine.kind == "local":
            engine.command = compiler
            engine.enabled = True
            return
    engine = EngineSpec(id=f"local-{Path(compiler).name}", kind="local", command=compiler)
    config.engines.append(OmegaConf.structured(engine))


def load_pipeline_settings(config_path: Path = None) -> PipelineSettings:
    """
    Load and validate pipeline settings.

    Args:
        config_path: Optional YAML file (defaults to RESUMEPILOT_CONFIG_PATH, then the packaged file)

    Returns:
        Validated PipelineSettings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the merged settings are inconsistent
    """
    if config_path is None:
        config_path = Path(os.getenv("RESUMEPILOT_CONFIG_PATH", DEFAULT_CONFIG_PATH))

    if not config_path.exists():
        raise FileNotFoundError(f"Pipeline config not found at {config_path}")

    schema = OmegaConf.structured(PipelineSettings)
    merged = OmegaConf.merge(
        schema,
        OmegaConf.load(config_path),
        OmegaConf.from_dotlist(_environment_overrides()),
    )

    compiler = os.getenv("LATEX_COMPILER")
    if compiler:
        _apply_local_compiler(merged, compiler)

    settings = OmegaConf.to_object(merged)
    _validate(settings)
    return settings
