from typing import List

import pandas as pd
from prefect import flow, get_run_logger, task

from webharvest.core.config import PipelineConfig
from webharvest.core.scraping.prefect_tasks import (
    crawl_level_task,
    extract_links_task,
    fetch_html_task,
)
from webharvest.extractors.factory import get_extractor


def _load_config(config_dict: dict) -> PipelineConfig:
    logger = get_run_logger()
    # Validação de Contrato (Pydantic): se falhar aqui, o flow para com erro claro.
    try:
        config = PipelineConfig(**config_dict)
    except Exception as e:
        logger.error("Invalid config: %s", e)
        raise
    logger.info("Config valid for job: %s", config.job_name)
    return config


@task(name="execute_extraction", retries=0)
def execute_extraction_strategy(config: PipelineConfig) -> pd.DataFrame:
    """
    Task que encapsula a estratégia de extração.
    """
    logger = get_run_logger()
    # 1. Pede para a fábrica a ferramenta certa (API genérica, Federal Register, crawler)
    ExtractorClass = get_extractor(config.source_type)

    # 2. Inicializa a ferramenta
    extractor = ExtractorClass(
        url=config.source_url, params=config.source_params, http=config.http
    )

    # 3. Executa sem saber o que tem dentro
    df = extractor.extract()
    logger.info("%s returned %d rows", ExtractorClass.__name__, len(df))
    return df


@flow(name="Universal Ingestion Pipeline", log_prints=True)
def run_ingestion_pipeline(config_dict: dict) -> pd.DataFrame:
    """
    Flow Mestre.
    Recebe um dicionário (JSON), valida o contrato e devolve o DataFrame
    produzido pelo extrator registrado para `source_type`.
    """
    config = _load_config(config_dict)
    return execute_extraction_strategy(config)


@flow(name="Link Crawl", log_prints=True)
def link_crawl_flow(config_dict: dict) -> List[str]:
    """Index page -> child pages -> one download link per child.

    source_params:
    - link_selector / link_pattern: which index links to follow
    - target_selector: the download link on each child page
    - base_for_relative: prefix for relative links (default: the page they are on)
    """
    logger = get_run_logger()
    config = _load_config(config_dict)
    params = config.source_params

    http = config.http
    base_for_relative = params.get("base_for_relative")

    html = fetch_html_task(
        config.source_url, timeout=http.timeout, user_agent=http.user_agent
    )
    child_urls = extract_links_task(
        html,
        config.source_url,
        selector=params.get("link_selector", "a"),
        pattern=params.get("link_pattern", r"[0-9]$"),
        base_for_relative=base_for_relative,
    )
    targets = crawl_level_task(
        child_urls,
        params.get("target_selector", "a[href$='.pdf']"),
        base_for_relative=base_for_relative,
        timeout=http.timeout,
        user_agent=http.user_agent,
    )

    resolved = [t for t in targets if t]
    if len(resolved) < len(targets):
        logger.warning(
            "Partial crawl: %d of %d pages resolved", len(resolved), len(targets)
        )
    logger.info("Resolved %d download links", len(resolved))
    return resolved


# ==========================================
# EXECUÇÃO LOCAL (Para testes)
# ==========================================
if __name__ == "__main__":
    payload = {
        "job_name": "federal_register_climate",
        "environment": "dev",
        "source_type": "federal_register",
        "source_url": "https://www.federalregister.gov/api/v1",
        "source_params": {"endpoint": "facets", "facet": "monthly", "term": "climate"},
    }
    print(run_ingestion_pipeline(payload).head())
