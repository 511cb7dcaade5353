__version__ = "0.1.0"

from .exceptions import (
    InspectorError as InspectorError,
    DocumentError as DocumentError,
    ConfigError as ConfigError,
    StorageError as StorageError,
    EntityNotFoundError as EntityNotFoundError,
)

from .models import (
    EntityKind as EntityKind,
    DocumentKind as DocumentKind,
    MorphemeType as MorphemeType,
    SourceType as SourceType,
    WordStatus as WordStatus,
    EDITABLE_FIELDS as EDITABLE_FIELDS,
    Morpheme as Morpheme,
    GlossaryEntry as GlossaryEntry,
    Rule as Rule,
    Word as Word,
    AlignmentLine as AlignmentLine,
    AlignmentDocument as AlignmentDocument,
    GlossaryDocument as GlossaryDocument,
    RuleDocument as RuleDocument,
    ResolvedMorpheme as ResolvedMorpheme,
    IndexedLine as IndexedLine,
)

from .patches import (
    PatchKey as PatchKey,
    PatchStore as PatchStore,
)

from .resolver import (
    identity as identity,
    resolve as resolve,
    resolve_morpheme as resolve_morpheme,
    resolve_morphemes as resolve_morphemes,
)

from .status import (
    classify_word as classify_word,
    aggregate_gloss as aggregate_gloss,
    short_gloss as short_gloss,
)

from .views import (
    GLOSSARY_VIEW_LIMIT as GLOSSARY_VIEW_LIMIT,
    filter_alignments as filter_alignments,
    filter_glossary as filter_glossary,
    filter_rules as filter_rules,
)

from .loader import (
    load_alignments as load_alignments,
    load_glossary as load_glossary,
    load_rules as load_rules,
    load_document as load_document,
)

from .storage import (
    PatchDB as PatchDB,
    DEFAULT_PATCH_DB as DEFAULT_PATCH_DB,
    export_patches as export_patches,
    import_patches as import_patches,
)

from .config import (
    InspectorConfig as InspectorConfig,
    load_config as load_config,
)

from .state import InspectorState as InspectorState

__all__ = [
    # Exceptions
    "InspectorError",
    "DocumentError",
    "ConfigError",
    "StorageError",
    "EntityNotFoundError",
    # Enums and constants
    "EntityKind",
    "DocumentKind",
    "MorphemeType",
    "SourceType",
    "WordStatus",
    "EDITABLE_FIELDS",
    "GLOSSARY_VIEW_LIMIT",
    "DEFAULT_PATCH_DB",
    # Records and documents
    "Morpheme",
    "GlossaryEntry",
    "Rule",
    "Word",
    "AlignmentLine",
    "AlignmentDocument",
    "GlossaryDocument",
    "RuleDocument",
    "ResolvedMorpheme",
    "IndexedLine",
    # Patches
    "PatchKey",
    "PatchStore",
    # Resolution and views
    "identity",
    "resolve",
    "resolve_morpheme",
    "resolve_morphemes",
    "classify_word",
    "aggregate_gloss",
    "short_gloss",
    "filter_alignments",
    "filter_glossary",
    "filter_rules",
    # Loading, storage and config
    "load_alignments",
    "load_glossary",
    "load_rules",
    "load_document",
    "PatchDB",
    "export_patches",
    "import_patches",
    "InspectorConfig",
    "load_config",
    # Application state
    "InspectorState",
]
