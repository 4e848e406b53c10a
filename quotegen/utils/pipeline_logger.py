"""Pipeline Output Logger for QuoteGen.

Provides highly visible, formatted logging for quote generation runs
with distinctive visual markers that stand out in log streams.
"""

import json
import structlog
from typing import Any, Dict, List
from datetime import datetime, timezone

logger = structlog.get_logger()

# Visual markers for different log types
BANNER_WIDTH = 80
PIPELINE_BANNER_CHAR = "█"
STAGE_BANNER_CHAR = "═"
MATERIAL_BANNER_CHAR = "─"


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def _format_json(data: Any, indent: int = 2) -> str:
    """Format data as pretty JSON string."""
    try:
        return json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(data)


def _preview(text: str, max_length: int = 120) -> str:
    text = " ".join((text or "").split())
    if len(text) > max_length:
        return text[:max_length] + f"... [truncated {len(text) - max_length} chars]"
    return text


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_pipeline_start(request_id: str, job_description: str) -> None:
    """Log pipeline start with prominent banner."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "QUOTE GENERATION STARTED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Request ID  : {request_id}")
    print(f"║ Timestamp   : {_timestamp()}")
    print(f"║ Description : {_preview(job_description)}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "pipeline_start_logged",
        request_id=request_id,
        description_length=len(job_description or "")
    )


def log_pipeline_complete(
    request_id: str,
    quote_number: str,
    material_count: int,
    manual_count: int,
    duration_ms: int
) -> None:
    """Log pipeline completion with summary."""
    print("\n")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(PIPELINE_BANNER_CHAR, "✓ QUOTE GENERATED"))
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print(f"║ Request ID       : {request_id}")
    print(f"║ Quote Number     : {quote_number}")
    print(f"║ Duration         : {duration_ms:,} ms ({duration_ms / 1000:.2f}s)")
    print(f"║ Materials        : {material_count}")
    print(f"║ To Be Quoted     : {manual_count}")
    print(PIPELINE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "pipeline_complete_logged",
        request_id=request_id,
        quote_number=quote_number,
        material_count=material_count,
        manual_count=manual_count,
        duration_ms=duration_ms
    )


def log_pipeline_failed(request_id: str, stage: str, error: str) -> None:
    """Log pipeline failure with details."""
    print("\n")
    print("!" * BANNER_WIDTH)
    print(_create_banner("!", "✗ QUOTE GENERATION FAILED"))
    print("!" * BANNER_WIDTH)
    print(f"║ Request ID       : {request_id}")
    print(f"║ Timestamp        : {_timestamp()}")
    print(f"║ Failed Stage     : {stage}")
    print(f"║ Error            : {error}")
    print("!" * BANNER_WIDTH)
    print("\n")

    logger.error(
        "pipeline_failed_logged",
        request_id=request_id,
        stage=stage,
        error=error
    )


def log_stage_output(request_id: str, stage: str, output: Dict[str, Any]) -> None:
    """Log the output of one pipeline stage."""
    print(STAGE_BANNER_CHAR * BANNER_WIDTH)
    print(_create_banner(STAGE_BANNER_CHAR, f"▶ STAGE: {stage.upper()}"))
    print(STAGE_BANNER_CHAR * BANNER_WIDTH)
    for line in _format_json(output).split("\n"):
        print(f"  {line}")
    print(STAGE_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "stage_output_logged",
        request_id=request_id,
        stage=stage,
        output_keys=list(output.keys())
    )


def log_material_resolved(
    request_id: str,
    material_name: str,
    strategy: str,
    option_names: List[str]
) -> None:
    """Log the options chosen for one material."""
    print(MATERIAL_BANNER_CHAR * BANNER_WIDTH)
    print(f"│ Material : {material_name}")
    print(f"│ Strategy : {strategy}")
    for name in option_names:
        print(f"│   • {name}")
    print(MATERIAL_BANNER_CHAR * BANNER_WIDTH)

    logger.info(
        "material_resolved",
        request_id=request_id,
        material=material_name,
        strategy=strategy,
        option_count=len(option_names)
    )
