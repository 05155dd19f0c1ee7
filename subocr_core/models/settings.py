# subocr_core/models/settings.py
"""Application settings dataclass.

This is the single source of truth for OCR pipeline configuration.
All settings are typed and have defaults, so pipeline code never reads raw
dict values.

Settings are organized by category:
- Preprocessing: Binarization threshold, border
- OCR Engine: Tesseract data path, language, blacklist, variables, DPI
- Concurrency: Worker pool size
- Output: Subtitle format, image dumps
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..errors import ConfigError

OUTPUT_FORMATS = ("srt", "ass")


@dataclass
class AppSettings:
    """Complete OCR settings with typed fields."""

    # =========================================================================
    # Preprocessing Settings
    # =========================================================================
    ocr_threshold: float = 0.6  # Normalized luminance above which a slot is ink
    ocr_border: int = 10  # White border around each line image (pixels)

    # =========================================================================
    # OCR Engine Settings
    # =========================================================================
    ocr_dpi: int = 150  # Resolution hint passed to Tesseract
    ocr_tessdata_path: str | None = None  # None = tesserocr default
    ocr_language: str = "eng"
    ocr_char_blacklist: str = "|\\/`_~"
    # (name, value) pairs applied after the built-in variables
    ocr_engine_vars: list[tuple[str, str]] = field(default_factory=list)

    # =========================================================================
    # Concurrency Settings
    # =========================================================================
    ocr_workers: int | None = None  # None = os.cpu_count()

    # =========================================================================
    # Output Settings
    # =========================================================================
    ocr_output_format: str = "srt"
    ocr_dump_images: bool = False
    ocr_dump_dir: str = "."

    @classmethod
    def from_config(cls, cfg: dict) -> AppSettings:
        """Create AppSettings from a config dictionary.

        Missing keys fall back to defaults. Engine variables may be given as
        ``[name, value]`` pairs or as ``"name=value"`` strings.
        """
        workers = cfg.get("ocr_workers")
        tessdata = cfg.get("ocr_tessdata_path")

        try:
            return cls(
                # Preprocessing Settings
                ocr_threshold=float(cfg.get("ocr_threshold", 0.6)),
                ocr_border=int(cfg.get("ocr_border", 10)),
                # OCR Engine Settings
                ocr_dpi=int(cfg.get("ocr_dpi", 150)),
                ocr_tessdata_path=str(tessdata) if tessdata else None,
                ocr_language=str(cfg.get("ocr_language", "eng")),
                ocr_char_blacklist=str(cfg.get("ocr_char_blacklist", "|\\/`_~")),
                ocr_engine_vars=[
                    parse_engine_var(v) for v in cfg.get("ocr_engine_vars", [])
                ],
                # Concurrency Settings
                ocr_workers=int(workers) if workers is not None else None,
                # Output Settings
                ocr_output_format=str(cfg.get("ocr_output_format", "srt")).lower(),
                ocr_dump_images=bool(cfg.get("ocr_dump_images", False)),
                ocr_dump_dir=str(cfg.get("ocr_dump_dir", ".")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid setting value: {e}") from e

    def validate(self) -> None:
        """Raise ConfigError if any value is outside its accepted range."""
        if not 0.0 <= self.ocr_threshold <= 1.0:
            raise ConfigError(
                f"Threshold must be between 0.0 and 1.0, got {self.ocr_threshold}"
            )
        if self.ocr_border < 0:
            raise ConfigError(f"Border must be non-negative, got {self.ocr_border}")
        if self.ocr_dpi <= 0:
            raise ConfigError(f"DPI must be positive, got {self.ocr_dpi}")
        if self.ocr_workers is not None and self.ocr_workers < 1:
            raise ConfigError(
                f"Worker count must be at least 1, got {self.ocr_workers}"
            )
        if not self.ocr_language:
            raise ConfigError("A Tesseract language code is required")
        if self.ocr_output_format not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Unsupported output format {self.ocr_output_format!r}, "
                f"expected one of {', '.join(OUTPUT_FORMATS)}"
            )

    def to_dict(self) -> dict:
        """Convert AppSettings to a JSON-serializable dictionary."""
        from dataclasses import fields

        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "ocr_engine_vars":
                value = [list(pair) for pair in value]
            result[f.name] = value
        return result


def parse_engine_var(spec) -> tuple[str, str]:
    """Normalize an engine variable given as ``"name=value"`` or a pair."""
    if isinstance(spec, str):
        name, sep, value = spec.partition("=")
        if not sep or not name:
            raise ConfigError(
                f"Engine variable must look like NAME=VALUE, got {spec!r}"
            )
        return name.strip(), value
    try:
        name, value = spec
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Engine variable must be a [name, value] pair, got {spec!r}"
        ) from e
    return str(name), str(value)
