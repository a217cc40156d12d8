"""Main analyzer that orchestrates the catalog pipeline."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from lua_api_annotator.annotations.generator import write_annotations
from lua_api_annotator.catalog import Catalog
from lua_api_annotator.config import FRAGMENT_KINDS, AnnotatorConfig, ensure_output_dirs
from lua_api_annotator.corpus import SourceFile, read_corpus
from lua_api_annotator.extraction import (
    clean_lua_content,
    collect_definition_names,
    collect_prefixed_calls,
    extract_definitions,
    extract_ffi_declarations,
    extract_helpers,
    infer_undocumented,
    record_exposures,
    resolve_exposure,
    strip_comments,
)
from lua_api_annotator.models import CatalogError, CatalogResult, FunctionRecord
from lua_api_annotator.page_loader import ReferencePageLoader
from lua_api_annotator.persistence import export_fragment, load_fragment, seed_catalog
from lua_api_annotator.reference_extractor import extract_reference_functions

logger = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    """Which record kinds to produce and how to treat cached fragments."""

    lua: bool = True
    ffi: bool = True
    helper: bool = True
    undocumented: bool = True
    exposed: bool = True
    use_cache: bool = False
    skip_export: bool = False

    def enabled_kinds(self) -> list[str]:
        return [kind for kind in FRAGMENT_KINDS if getattr(self, kind)]


def analyze_file(
    source: SourceFile, catalog: Catalog, skip_passes: Iterable[str] = ()
) -> None:
    """Run every per-file extraction pass over one file.

    Definition passes always run, since exposure resolution and the
    undocumented pass depend on them.

    Args:
        source: The file to analyze
        catalog: Catalog receiving the results
        skip_passes: Kinds ("ffi", "helper", "exposed") already seeded
    """
    file_name = source.name
    skip_passes = set(skip_passes)

    if "ffi" not in skip_passes:
        extract_ffi_declarations(source.text, file_name, catalog)

    cleaned = clean_lua_content(source.text)
    extract_definitions(cleaned, file_name, catalog)
    collect_definition_names(cleaned, catalog)
    collect_prefixed_calls(cleaned, catalog)

    stripped = strip_comments(source.text)
    if "helper" not in skip_passes:
        extract_helpers(stripped, file_name, catalog)
    if "exposed" not in skip_passes:
        record_exposures(stripped, file_name, catalog)


def build_catalog(
    files: Iterable[SourceFile],
    reference: Iterable[FunctionRecord] = (),
    catalog: Catalog | None = None,
    skip_passes: Iterable[str] = (),
    infer: bool = True,
) -> CatalogResult:
    """Build the catalog from a corpus and produce the output collections.

    Args:
        files: The corpus
        reference: Records parsed from the reference page
        catalog: Catalog to extend, e.g. one seeded from fragments
        skip_passes: Per-file passes to leave out
        infer: Whether to run the undocumented-call pass

    Returns:
        CatalogResult with every collection and any per-file errors
    """
    catalog = catalog if catalog is not None else Catalog()
    files = list(files)
    errors: list[CatalogError] = []

    for record in reference:
        catalog.add_reference(record)

    analyzed = []
    logger.info(f"Analyzing {len(files)} Lua files")
    for source in files:
        try:
            analyze_file(source, catalog, skip_passes)
            analyzed.append(source)
        except Exception as e:
            logger.warning(f"Error processing {source.path}: {e}")
            errors.append(
                CatalogError(file=source.path, error=str(e), phase="extraction")
            )

    if infer:
        infer_undocumented(analyzed, catalog)

    exposures = {
        name: resolve_exposure(exposure, catalog)
        for name, exposure in catalog.exposures.items()
    }
    unresolved = sum(1 for resolved in exposures.values() if not resolved.resolved)
    if unresolved:
        logger.info(f"{unresolved} exposed functions could not be resolved")

    result = CatalogResult(
        lua_functions=dict(catalog.reference_functions),
        ffi_functions=dict(catalog.ffi_functions),
        ffi_types=dict(catalog.ffi_types),
        helper_functions=dict(catalog.helper_functions),
        undocumented_functions=dict(catalog.undocumented),
        exposures=exposures,
        definitions={record.key: record for record in catalog.records()},
        errors=errors,
    )
    logger.info(
        f"Catalog complete: {len(catalog)} definitions, "
        f"{len(result.ffi_functions)} FFI functions, "
        f"{len(result.helper_functions)} helpers, "
        f"{len(result.undocumented_functions)} undocumented, "
        f"{len(exposures)} exposed, {len(errors)} errors"
    )
    return result


async def fetch_reference(config: AnnotatorConfig) -> list[FunctionRecord]:
    """Load the reference page (or its cached copy) and parse its functions.

    Raises:
        ReferencePageError: If neither the page nor a cached copy is usable
    """
    async with ReferencePageLoader(timeout_ms=config.fetch_timeout_ms) as loader:
        page = await loader.load(config.wiki_url, cache_path=config.wiki_html)
        return await extract_reference_functions(page)


def seed_from_fragments(
    catalog: Catalog, config: AnnotatorConfig, kinds: Iterable[str]
) -> set[str]:
    """Pre-seed the catalog from saved fragments.

    Returns:
        Kinds whose pass can be skipped because a non-empty fragment was
        loaded.
    """
    seeded = set()
    for kind in kinds:
        records = load_fragment(kind, config.fragment_path(kind))
        if not records:
            continue
        seed_catalog(catalog, kind, records)
        seeded.add(kind)
    return seeded


async def run_generation(
    config: AnnotatorConfig, options: GenerationOptions
) -> CatalogResult:
    """Run the full pipeline: reference page, corpus, fragments, annotations.

    Args:
        config: Loaded configuration
        options: Enabled kinds and cache behaviour

    Returns:
        The CatalogResult the annotation files were written from

    Raises:
        CorpusError: If the Lua folder is missing
        ReferencePageError: If the reference page is needed but unavailable
    """
    ensure_output_dirs(config)
    kinds = options.enabled_kinds()
    catalog = Catalog()

    seeded: set[str] = set()
    if options.use_cache:
        seeded = seed_from_fragments(catalog, config, kinds)

    # Exposures are resolved against the corpus definitions even when seeded
    needs_processing = "exposed" in kinds or any(k not in seeded for k in kinds)

    reference: list[FunctionRecord] = []
    if options.lua and "lua" not in seeded:
        reference = await fetch_reference(config)

    files: list[SourceFile] = []
    errors: list[CatalogError] = []
    if needs_processing:
        files, failures = read_corpus(config.lua_folder)
        errors.extend(
            CatalogError(file=path, error=message, phase="reading")
            for path, message in failures
        )
    else:
        logger.info("All enabled kinds loaded from fragments, skipping corpus scan")

    result = build_catalog(
        files,
        reference,
        catalog=catalog,
        skip_passes=seeded,
        infer=options.undocumented and "undocumented" not in seeded,
    )
    result.errors = errors + result.errors

    if not (options.skip_export or options.use_cache):
        for kind in kinds:
            export_fragment(kind, result, config.fragment_path(kind))

    write_annotations(result, config, kinds)
    return result
