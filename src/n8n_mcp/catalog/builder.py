"""Full catalog rebuild: scan, extract, document, persist.

Every build replaces the whole catalog. Per-node failures are contained and
reported in aggregate through ``BuildReport``.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from n8n_mcp.core.settings import CatalogSettings

from .documentation import fetch_remote_documentation
from .extractor import NodeDescriptorExtractor
from .models import BuildMetadata, BuildReport, Provenance
from .scanner import scan_packages
from .store import CatalogStore, version_number

logger = logging.getLogger(__name__)


def rebuild_catalog(
    settings: CatalogSettings,
    fetch_docs: bool = True,
    session: Optional[requests.Session] = None,
    log: Optional[logging.Logger] = None,
) -> BuildReport:
    """
    Rebuild the node catalog from the locally installed plugin packages.

    Args:
        settings: Catalog settings (database path, version tag, packages, search paths)
        fetch_docs: Fetch upstream README documentation for the version tag
        session: requests session for the documentation fetch
        log: Logger (defaults to the module logger)

    Returns:
        BuildReport with success and failure counts
    """
    log = log or logger
    version_tag = settings.version_tag
    log.info(f"Rebuilding n8n node catalog for {version_tag}")

    scan = scan_packages(settings.packages, settings.search_paths, log=log)
    log.info(f"Loaded {len(scan.nodes)} nodes total")

    docs_map: dict[str, str] = {}
    if fetch_docs:
        docs_map = fetch_remote_documentation(version_tag, session=session, timeout=settings.fetch_timeout, log=log)
        log.info(f"Fetched documentation for {len(docs_map)} nodes")

    extractor = NodeDescriptorExtractor(logger=log)
    descriptors, failures = extractor.extract_all(scan.nodes, docs_map)
    docs_extracted = sum(1 for d in descriptors if d.documentation)

    metadata = BuildMetadata(
        source_version_tag=version_tag,
        built_at=datetime.now(timezone.utc),
        provenance=Provenance.LOCAL_AND_REMOTE_DOCS if fetch_docs else Provenance.LOCAL_ONLY,
        docs_extracted=docs_extracted,
    )

    with CatalogStore(settings.db_path, read_only=False, logger=log) as store:
        store.replace_all(descriptors, metadata)

    report = BuildReport(
        version=version_number(version_tag),
        db_path=str(settings.db_path),
        scanned=len(scan.nodes),
        extracted=len(descriptors),
        docs_extracted=docs_extracted,
        load_failures=[(f.module_path, str(f.original_error)) for f in scan.failures],
        extraction_failures=[(f.node_name, f.reason) for f in failures],
    )
    log.info(
        f"Successfully processed {report.extracted}/{report.scanned} nodes, "
        f"documentation for {report.docs_extracted} nodes"
    )
    return report
