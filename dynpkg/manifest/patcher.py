import logging
import re
from dataclasses import dataclass
from pathlib import Path

from ..config import BASE_TOKEN, IDENTITY_SUFFIX
from ..errors import ManifestMissingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatchResult:
    identity: str
    replacements: int
    already_patched: bool = False

    @property
    def changed(self) -> bool:
        return self.replacements > 0


class ManifestPatcher:
    """Rewrites every base-token occurrence in the manifest to '<identity><suffix>'."""

    def __init__(self, manifest: Path, base_token: str = BASE_TOKEN, suffix: str = IDENTITY_SUFFIX):
        if not base_token:
            raise ValueError("base_token must not be empty")
        self.manifest = Path(manifest)
        self.base_token = base_token
        self.suffix = suffix

    def replacement_for(self, identity: str) -> str:
        return f"{identity}{self.suffix}"

    def _read(self) -> str:
        if not self.manifest.is_file():
            logger.error("%s not found!", self.manifest)
            raise ManifestMissingError(self.manifest)
        with open(self.manifest, encoding="utf-8", errors="surrogateescape", newline="") as f:
            return f.read()

    def count_token(self) -> int:
        return self._read().count(self.base_token)

    def _looks_patched(self, content: str, identity: str) -> bool:
        if self.replacement_for(identity) in content:
            return True
        # a bare generated segment followed by the suffix, e.g. "k3j9x0aa.action"
        pattern = r"(?<![\w.])[a-z][a-z0-9]{3,31}" + re.escape(self.suffix) + r"(?!\w)"
        return re.search(pattern, content) is not None

    def apply_identity(self, identity: str) -> PatchResult:
        content = self._read()
        count = content.count(self.base_token)

        if count == 0:
            already = self._looks_patched(content, identity)
            if already:
                logger.warning(
                    "%s appears to be patched already; restore it before applying a new identity",
                    self.manifest,
                )
            else:
                logger.warning("%s does not contain %s, left unchanged", self.manifest, self.base_token)
            return PatchResult(identity=identity, replacements=0, already_patched=already)

        patched = content.replace(self.base_token, self.replacement_for(identity))
        with open(self.manifest, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write(patched)
        logger.info("Modified %s with package: %s (%d replacement(s))", self.manifest.name, identity, count)
        return PatchResult(identity=identity, replacements=count)
