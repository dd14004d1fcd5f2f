from webharvest.extractors.base_api import RestApiExtractor
from webharvest.extractors.federal_register import FederalRegisterExtractor
from webharvest.extractors.scraping_extractor import LinkCrawlExtractor


def get_extractor(extractor_type: str):
    """
    Factory Pattern: Decide dinamicamente qual classe instanciar.
    O Flow não precisa saber quais extratores existem.
    """
    extractors_map = {
        "rest_api": RestApiExtractor,
        "federal_register": FederalRegisterExtractor,
        "link_crawl": LinkCrawlExtractor,
    }

    extractor_class = extractors_map.get(extractor_type)

    if not extractor_class:
        raise ValueError(f"❌ Extrator '{extractor_type}' não registrado na Factory.")

    return extractor_class
