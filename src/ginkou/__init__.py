"""ginkou: a Japanese sentence bank indexed by dictionary-form words."""

__version__ = "0.2.0"

from ginkou.bank import SentenceBank as SentenceBank
from ginkou.db import DEFAULT_LIMIT as DEFAULT_LIMIT
from ginkou.exceptions import (
    ConfigError as ConfigError,
    GinkouError as GinkouError,
    StorageError as StorageError,
    TokenizationError as TokenizationError,
)
from ginkou.models import (
    BankStats as BankStats,
    BatchResult as BatchResult,
    IngestResult as IngestResult,
    SentenceModel as SentenceModel,
    WordModel as WordModel,
)
from ginkou.segmenter import (
    Segmenter as Segmenter,
    StaticSegmenter as StaticSegmenter,
    SudachiSegmenter as SudachiSegmenter,
    create_segmenter as create_segmenter,
    whitespace_segmenter as whitespace_segmenter,
)

__all__ = [
    "__version__",
    # Main class
    "SentenceBank",
    # Constants
    "DEFAULT_LIMIT",
    # Exceptions
    "GinkouError",
    "StorageError",
    "TokenizationError",
    "ConfigError",
    # Models
    "WordModel",
    "SentenceModel",
    "IngestResult",
    "BatchResult",
    "BankStats",
    # Segmenters
    "Segmenter",
    "StaticSegmenter",
    "SudachiSegmenter",
    "create_segmenter",
    "whitespace_segmenter",
]
