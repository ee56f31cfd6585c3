"""
Classificação de sentimento dos comentários livres.

A estratégia é escolhida na construção, conforme a credencial disponível:

- OpenAIClassifier: modelo remoto, com fallback para a heurística de palavras-chave
- KeywordClassifier: apenas a heurística de palavras-chave
- NeutralClassifier: sem credencial, tudo é neutro

Nenhuma estratégia levanta exceção para quem chama: o pipeline nunca para
nem descarta uma linha por causa da classificação.
"""
import json
import logging
from dataclasses import dataclass
from typing import Protocol

from openai import OpenAI

from .tables.feedback_schema import clamp_score, normalize_label

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2
SYSTEM_PROMPT = (
    'Analyze the sentiment of employee feedback. Return a JSON object with "score" '
    '(number between -1 and 1) and "label" (positive, neutral, or negative). Be concise.'
)

POSITIVE_WORDS = ("good", "great", "excellent", "love", "amazing", "fantastic")
NEGATIVE_WORDS = ("bad", "terrible", "hate", "awful", "poor", "disappointing")


@dataclass(frozen=True)
class Sentiment:
    """Score em [-1, 1] e rótulo em {positive, neutral, negative}."""
    score: float = 0.0
    label: str = "neutral"

    def __post_init__(self):
        object.__setattr__(self, 'score', clamp_score(self.score))
        object.__setattr__(self, 'label', normalize_label(self.label))


NEUTRAL = Sentiment(0.0, "neutral")


def keyword_sentiment(text: str) -> Sentiment:
    """
    Heurística determinística de palavras-chave.

    Cada palavra conta uma vez se aparecer no texto (sem diferenciar
    maiúsculas, por substring). Mais positivas que negativas dá (0.5, positive),
    o contrário (-0.5, negative), e empate (0, neutral).
    """
    lowered = (text or "").lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)

    if positive > negative:
        return Sentiment(0.5, "positive")
    if negative > positive:
        return Sentiment(-0.5, "negative")
    return NEUTRAL


def parse_model_output(content: str | None) -> Sentiment:
    """
    Interpreta a resposta do modelo como {"score": ..., "label": ...}.

    Raises:
        ValueError: Se o conteúdo não for um objeto JSON.
    """
    data = json.loads(content or "")
    if not isinstance(data, dict):
        raise ValueError(f"Resposta do modelo não é um objeto JSON: {content!r}")
    return Sentiment(data.get("score", 0), data.get("label"))


class SentimentClassifier(Protocol):
    def classify(self, text: str) -> Sentiment:
        ...


class NeutralClassifier:
    """Usado quando não há credencial do serviço de classificação."""

    def classify(self, text: str) -> Sentiment:
        return NEUTRAL


class KeywordClassifier:
    def classify(self, text: str) -> Sentiment:
        if not text or not text.strip():
            return NEUTRAL
        return keyword_sentiment(text)


class OpenAIClassifier:
    """
    Classifica via chat completion da OpenAI.

    Qualquer falha da chamada, ou resposta fora do formato esperado, cai na
    heurística de palavras-chave.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        client: OpenAI | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        """
        Args:
            api_key: Chave da OpenAI.
            model: Modelo de chat.
            client: Cliente já construído (usado nos testes).
            timeout: Limite em segundos de cada requisição ao modelo.
            max_retries: Retentativas internas do cliente para erros transitórios.
        """
        self.model = model
        self.client = client or OpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)

    def _request(self, text: str) -> str | None:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f'Analyze this employee feedback: "{text}"'},
            ],
            temperature=0.1,
            max_tokens=100,
        )
        return response.choices[0].message.content

    def classify(self, text: str) -> Sentiment:
        if not text or not text.strip():
            return NEUTRAL

        try:
            content = self._request(text)
        except Exception as e:
            logger.warning("Erro na análise de sentimento remota, usando heurística: %s", e)
            return keyword_sentiment(text)

        try:
            return parse_model_output(content)
        except Exception as e:
            logger.warning("Resposta do modelo fora do formato esperado, usando heurística: %s", e)
            return keyword_sentiment(text)


def build_classifier(
    api_key: str | None,
    model: str = DEFAULT_MODEL,
    backend: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> SentimentClassifier:
    """
    Escolhe a estratégia de classificação.

    Args:
        api_key: Chave da OpenAI; ausente significa sem modelo remoto.
        model: Modelo de chat usado pelo OpenAIClassifier.
        backend: "keyword" força a heurística; "openai" ou None decidem pela chave.
        timeout: Limite em segundos de cada requisição ao modelo.
        max_retries: Retentativas internas do cliente OpenAI.

    Returns:
        SentimentClassifier: Estratégia escolhida.
    """
    if backend == "keyword":
        logger.info("Classificador de sentimento: heurística de palavras-chave")
        return KeywordClassifier()

    if api_key:
        logger.info("Classificador de sentimento: OpenAI (%s)", model)
        return OpenAIClassifier(api_key, model=model, timeout=timeout, max_retries=max_retries)

    logger.info("OPENAI_API_KEY ausente. Sentimentos serão registrados como neutros.")
    return NeutralClassifier()
