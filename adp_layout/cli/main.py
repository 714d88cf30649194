import logging
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from adp_layout.converters.adp_results import AnalyzerResults
from adp_layout.converters.docling_export import layout_to_docling
from adp_layout.datamodels.config import AdpConfig
from adp_layout.datamodels.types import ConfidenceAction, FieldsAction
from adp_layout.fields.field_store import fields_file_name
from adp_layout.layout_xml.serializer import write_layout_xml
from adp_layout.pipeline import PageResult, process_page, process_pages

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
_log = logging.getLogger(__name__)

load_dotenv()

CONFIG_ENV_VAR = "ADP_CONFIG"

app = typer.Typer(add_completion=False)


def _load_config(
    config_path: Optional[Path],
    fields_action: Optional[str],
    confidence_action: Optional[str],
    field_suffix: Optional[str],
) -> AdpConfig:
    """Configuration file (``--config`` or ``$ADP_CONFIG``) with CLI overrides."""
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])
    config = AdpConfig.load(config_path) if config_path is not None else AdpConfig()
    if fields_action is not None:
        config.fields_action = FieldsAction.parse(fields_action)
    if confidence_action is not None:
        config.confidence_action = ConfidenceAction.parse(confidence_action)
    if field_suffix is not None:
        config.field_suffix = field_suffix
    return config


def _write_page(result: PageResult, output_dir: Path) -> None:
    layout_path = write_layout_xml(result.layout_xml, output_dir, result.page_id)
    fields_path = output_dir / fields_file_name(result.page_id)
    result.page_field.save_as_json(fields_path)
    _log.info(f"Wrote {layout_path} and {fields_path}")


@app.command()
def process(
    json_file: Path = typer.Argument(..., help="Analyzer JSON result file."),
    output_dir: Path = typer.Option(
        Path("."), help="Directory for the layout XML and fields JSON."
    ),
    page_id: Optional[str] = typer.Option(
        None, help="Page id used in output names (default: the JSON file stem)."
    ),
    page: int = typer.Option(0, help="Index of the page in the result's pageList."),
    config: Optional[Path] = typer.Option(
        None, help=f"Configuration JSON file (default: ${CONFIG_ENV_VAR})."
    ),
    fields_action: Optional[str] = typer.Option(
        None,
        help="keepall, keepallwithkeyclass, keepsinglebest or "
        "keepsinglebestwithkeyclass.",
    ),
    confidence_action: Optional[str] = typer.Option(
        None, help="keepall, keephigh, keepmedium or deleteall."
    ),
    field_suffix: Optional[str] = typer.Option(
        None, help="Suffix appended to every field name (default: _ADP)."
    ),
) -> None:
    """
    Build the layout XML and the fields of one page of an analyzer result.
    """
    adp_config = _load_config(config, fields_action, confidence_action, field_suffix)
    results = AnalyzerResults.from_file(json_file)
    output_dir.mkdir(parents=True, exist_ok=True)
    result = process_page(results, page, page_id or json_file.stem, adp_config)
    _write_page(result, output_dir)


@app.command()
def spread(
    json_file: Path = typer.Argument(..., help="Analyzer JSON result file."),
    output_dir: Path = typer.Option(
        Path("."), help="Directory for the layout XML and fields JSON files."
    ),
    pages: Optional[int] = typer.Option(
        None, help="Number of pages to process (default: every page in the result)."
    ),
    page_id_prefix: Optional[str] = typer.Option(
        None, help="Page ids are <prefix>_<index> (default prefix: the JSON file stem)."
    ),
    config: Optional[Path] = typer.Option(
        None, help=f"Configuration JSON file (default: ${CONFIG_ENV_VAR})."
    ),
    fields_action: Optional[str] = typer.Option(None, help="Selection mode."),
    confidence_action: Optional[str] = typer.Option(None, help="Confidence filter."),
    field_suffix: Optional[str] = typer.Option(None, help="Field name suffix."),
) -> None:
    """
    Apply one multi-page analyzer result to each of its pages.
    """
    adp_config = _load_config(config, fields_action, confidence_action, field_suffix)
    results = AnalyzerResults.from_file(json_file)
    page_total = pages if pages is not None else results.page_count
    prefix = page_id_prefix or json_file.stem
    page_ids = [f"{prefix}_{index}" for index in range(page_total)]

    output_dir.mkdir(parents=True, exist_ok=True)
    for result in process_pages(results, page_ids, adp_config, show_progress=True):
        if result.succeeded:
            _write_page(result, output_dir)
    _log.info(f"Processed {page_total} pages of {json_file}")


@app.command()
def docling(
    json_file: Path = typer.Argument(..., help="Analyzer JSON result file."),
    output_dir: Path = typer.Option(Path("."), help="Output directory."),
    page: int = typer.Option(0, help="Index of the page in the result's pageList."),
) -> None:
    """
    Export the layout of one page as a DoclingDocument JSON file.
    """
    results = AnalyzerResults.from_file(json_file)
    document = layout_to_docling(
        results.blocks(page),
        results.tables(page),
        results.page_dimensions(),
        name=json_file.stem,
    )
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{json_file.stem}_{page}.json"
    document.save_as_json(output_path)
    _log.info(f"Wrote {output_path}")


if __name__ == "__main__":
    app()
