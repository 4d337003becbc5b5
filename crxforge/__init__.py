"""crxforge: versioning, delta patching and publishing of CRX components.

Each component is hashed, assigned the next version from the ledger,
staged, packed and signed, diffed against its recent releases, uploaded
with its patches, re-tagged as latest and recorded in the ledger.
"""

__version__ = "0.1.0"
__description__ = "Versioning, delta patching and publishing of CRX components"

from crxforge.config import PublishConfig
from crxforge.core.orchestrator import PublishOrchestrator

__all__ = ["PublishConfig", "PublishOrchestrator", "__version__"]
