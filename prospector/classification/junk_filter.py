from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
Tu es un expert en prospection commerciale B2B sur le marché français.

On te donne une liste JSON de noms d'établissements. Identifie les noms qui correspondent à :
1. Des grandes chaînes nationales ou internationales (ex: Zara, H&M, McDonald's).
2. Des franchises connues (ex: Century 21, Orpi).
3. Des banques et assurances (ex: Crédit Agricole, AXA, BNP).
4. Des supermarchés et hypermarchés (ex: Carrefour, Leclerc, Auchan, Lidl).
5. Des services publics ou administratifs (ex: La Poste, Mairie, École, CPAM).
6. Des stations essence (Total, Esso).
7. Des pompes funèbres (Roc Eclerc).
8. Des agences d'intérim (Adecco, Manpower).

Consigne stricte : retourne UNIQUEMENT du JSON valide au format exact
{"excluded": ["<nom>", ...]}
contenant les noms EXACTS, recopiés caractère pour caractère depuis la liste d'entrée,
qui doivent être EXCLUS. Un commerce indépendant ne doit jamais apparaître dans la réponse."""


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


def parse_exclusions(content: str) -> list[str]:
    """
    Extract the excluded names from an LLM reply.

    Accepts ``{"excluded": [...]}`` or a bare JSON array. Anything that is not
    a list made only of strings is treated as an empty answer.
    """
    try:
        parsed = json.loads(content)
    except (TypeError, ValueError):
        logger.warning("Junk filter returned invalid JSON; treating chunk as unfiltered")
        return []

    if isinstance(parsed, dict):
        parsed = parsed.get("excluded")
    if not isinstance(parsed, list) or not all(isinstance(n, str) for n in parsed):
        logger.warning("Junk filter returned an unexpected shape; treating chunk as unfiltered")
        return []
    return parsed


class JunkClassifier:
    """Flags names of non-viable sales leads (chains, banks, public services...)."""

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG, client: Groq | None = None):
        self.config = config
        self._client = client

    @property
    def active(self) -> bool:
        return self.config.enabled and bool(self.config.api_key or self._client)

    def _get_client(self) -> Groq:
        if self._client is None:
            self._client = Groq(api_key=self.config.api_key, timeout=self.config.timeout)
        return self._client

    def classify_chunk(self, names: list[str]) -> list[str]:
        """
        Ask the LLM which of ``names`` to exclude.

        Raises whatever the transport raises; only the reply content is
        sanitized here. Names that are not part of ``names`` are dropped.
        """
        response = self._get_client().chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": json.dumps(names, ensure_ascii=False)},
            ],
            max_tokens=self.config.max_tokens,
            temperature=0.0,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""
        known = set(names)
        return [n for n in parse_exclusions(content) if n in known]

    def find_exclusions(self, names: list[str]) -> set[str]:
        """
        Return the set of names to drop from an import.

        Names are sent in chunks of ``config.chunk_size``. A chunk whose call
        fails is logged and skipped, so its names stay in the import.
        """
        if not names or not self.active:
            return set()

        excluded: set[str] = set()
        chunks = chunked(names, self.config.chunk_size)
        for index, chunk in enumerate(chunks):
            try:
                excluded.update(self.classify_chunk(chunk))
            except Exception:
                logger.warning(
                    "Junk filter failed on chunk %d/%d (%d names), keeping them all",
                    index + 1, len(chunks), len(chunk), exc_info=True,
                )
        logger.info("Junk filter flagged %d of %d names", len(excluded), len(names))
        return excluded
