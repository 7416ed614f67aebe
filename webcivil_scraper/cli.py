# webcivil_scraper/cli.py
import sys
import asyncio
import logging
from typing import Optional

import typer
from pydantic import ValidationError

from webcivil_scraper.core.config import load_settings
from webcivil_scraper.models_api.scrape import CaseQuery, ScrapeResult
from webcivil_scraper.services.case_scraper import CaseScraperService
from webcivil_scraper.services.pipeline_state import exit_code_for
from webcivil_scraper.services.status_reporter import build_status_reporter

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Download the foreclosure judgment and notice of sale for a NY WebCivil case.")


def configure_logging(level_name: str) -> None:
    # stdout is reserved for the JSON result
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


async def run_scrape(query: CaseQuery, job_id: Optional[str] = None) -> ScrapeResult:
    settings = load_settings()
    status_reporter = build_status_reporter(settings)
    try:
        service = CaseScraperService(settings, status_reporter=status_reporter)
        return await service.scrape_case(query, job_id=job_id)
    finally:
        status_reporter.close()


@app.command()
def scrape(
    index_number: str = typer.Argument(..., help="Court index number, e.g. 606529/2023"),
    county: str = typer.Argument(..., help="County name, e.g. Suffolk"),
    job_id: Optional[str] = typer.Argument(None, help="Optional job identifier used in log lines"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    settings = load_settings()
    configure_logging("DEBUG" if verbose else settings.LOG_LEVEL)

    try:
        query = CaseQuery(index_number=index_number, county=county)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        typer.echo(f"Invalid input: {messages}", err=True)
        raise typer.Exit(code=1)

    result = asyncio.run(run_scrape(query, job_id))
    typer.echo(result.to_json())
    raise typer.Exit(code=exit_code_for(result))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
