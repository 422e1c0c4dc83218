"""Emotional analysis, categorization, and titling of journal text via OpenAI."""

import json
import re
from dataclasses import dataclass, field
from datetime import date

from app.config import get_settings
from app.exceptions import ProviderError

CATEGORIES = [
    "Ansiedade",
    "Depressão",
    "Estresse",
    "Relacionamentos",
    "Família",
    "Trabalho",
    "Estudos",
    "Saúde",
    "Sono",
    "Alimentação",
    "Lazer",
    "Finanças",
    "Espiritualidade",
    "Metas Pessoais",
    "Crescimento Pessoal",
    "Reflexões Gerais",
    "Conquistas",
    "Desafios",
    "Memórias",
    "Pensamentos Criativos",
]
DEFAULT_CATEGORY = "Reflexões Gerais"

_MONTHS_PT = ["jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"]

MOOD_ANALYSIS_SYSTEM_PROMPT = (
    "Você é um psicólogo especializado em análise emocional e saúde mental. "
    "Forneça insights profundos e recomendações úteis em português."
)
MOOD_ANALYSIS_PROMPT = """
Analise detalhadamente o texto a seguir e o humor declarado pelo usuário.

Texto do diário: "{content}"
Humor declarado pelo usuário: "{mood}"

Gere uma resposta no formato json com os campos:
1. detailedAnalysis: análise em português (3-5 frases) do estado emocional.
2. emotionalTone: o tom emocional predominante em uma palavra.
3. sentimentScore: pontuação entre -100 (extremamente negativo) e 100 (extremamente positivo).
4. dominantEmotions: array com 3-5 emoções dominantes.
5. recommendedActions: array com 3-5 ações recomendadas.
"""
CATEGORY_PROMPT = """
Analise o seguinte texto e classifique-o em UMA ÚNICA categoria dentre as opções fornecidas.
Retorne APENAS o nome da categoria, sem explicações.

Categorias disponíveis: {categories}

Texto: "{content}"

Categoria:
"""
SUMMARY_PROMPT = """
Resuma o seguinte texto de diário em 2-3 frases curtas, capturando os pontos principais:

Texto: "{content}"

Resumo:
"""
TAGS_PROMPT = """
Analise o seguinte texto de diário e extraia 3 a 5 palavras-chave ou frases curtas que representem os temas principais.
Retorne apenas as tags separadas por vírgulas, sem numeração.

Texto: "{content}"

Tags:
"""
TITLE_PROMPT = """
Gere um título curto, impactante e emotivo para a seguinte entrada de diário.
Ideal: 3-5 palavras, máximo 6. Title Case, sem pontuação final, sem aspas e sem emoji.

Texto do diário:
{content}

Responda apenas com o título.
"""

EMOTION_COLORS = {
    "felicidade": "#86efac",
    "alegria": "#86efac",
    "satisfação": "#a5f3fc",
    "amor": "#f9a8d4",
    "carinho": "#f9a8d4",
    "afeto": "#f9a8d4",
    "motivação": "#93c5fd",
    "tristeza": "#a1a1aa",
    "desapontamento": "#a1a1aa",
    "ansiedade": "#fdba74",
    "preocupação": "#fdba74",
    "medo": "#fdba74",
    "raiva": "#fda4af",
    "irritação": "#fda4af",
    "frustração": "#fda4af",
    "calma": "#a5b4fc",
    "serenidade": "#a5b4fc",
    "tranquilidade": "#a5b4fc",
    "neutro": "#7dd3fc",
}
MOOD_COLORS = {
    "feliz": "#86efac",
    "happy": "#86efac",
    "alegre": "#86efac",
    "triste": "#a1a1aa",
    "sad": "#a1a1aa",
    "ansioso": "#fdba74",
    "anxious": "#fdba74",
    "irritado": "#fda4af",
    "angry": "#fda4af",
    "raiva": "#fda4af",
    "calmo": "#a5b4fc",
    "calm": "#a5b4fc",
}
DEFAULT_COLOR = "#7dd3fc"


@dataclass
class MoodAnalysis:
    """Structured emotional reading of a journal text."""

    detailed_analysis: str
    emotional_tone: str
    sentiment_score: int
    dominant_emotions: list[str] = field(default_factory=list)
    recommended_actions: list[str] = field(default_factory=list)


def clean_ai_text(text: str | None) -> str:
    """Strip markdown emphasis, stray escapes, and extra whitespace from model output."""
    if not text:
        return ""
    cleaned = text.replace("\\n", "\n").replace("\\r", "\r").replace("\\t", "    ")
    for pattern in (r"\*\*(.*?)\*\*", r"\*(.*?)\*", r"__(.*?)__", r"`(.*?)`", r"~~(.*?)~~"):
        cleaned = re.sub(pattern, r"\1", cleaned)
    cleaned = re.sub(r"[*`~]", "", cleaned)
    cleaned = re.sub(r"\\(.)", r"\1", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    cleaned = re.sub(r" {2,}", " ", cleaned)
    return cleaned.strip()


def fallback_title(today: date | None = None) -> str:
    """Dated title used when the model gives nothing usable."""
    today = today or date.today()
    return f"Reflexão de {today.day:02d} {_MONTHS_PT[today.month - 1]}"


def color_for(dominant_emotions: list[str], mood: str) -> str:
    """Pick the entry colour from the first dominant emotion, else from the declared mood."""
    if dominant_emotions:
        first = dominant_emotions[0].lower()
        for emotion, color in EMOTION_COLORS.items():
            if emotion in first:
                return color
    return MOOD_COLORS.get(mood.lower(), DEFAULT_COLOR)


class AnalysisService:
    """Runs the text-analysis prompts against the OpenAI chat API."""

    def __init__(self) -> None:
        self._client = None

    def _get_client(self):
        """Lazy-create the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            settings = get_settings()
            self._client = OpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT_SECONDS)
        return self._client

    def _complete(self, system: str, prompt: str, json_mode: bool = False, **options) -> str:
        """Send one chat completion and return the stripped answer. Raises ProviderError."""
        settings = get_settings()
        kwargs = {
            "model": settings.OPENAI_MODEL,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            **options,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            response = self._get_client().chat.completions.create(**kwargs)
        except Exception as e:
            raise ProviderError(f"Analysis provider failed: {e}") from e
        return (response.choices[0].message.content or "").strip()

    def analyze_mood(self, content: str, declared_mood: str) -> MoodAnalysis:
        """Extract emotional tone, sentiment, dominant emotions, and recommendations."""
        answer = self._complete(
            MOOD_ANALYSIS_SYSTEM_PROMPT,
            MOOD_ANALYSIS_PROMPT.format(content=content, mood=declared_mood),
            json_mode=True,
            temperature=0.5,
            max_tokens=800,
        )
        try:
            data = json.loads(answer or "{}")
        except json.JSONDecodeError as e:
            raise ProviderError("Analysis provider returned malformed JSON") from e
        if not isinstance(data, dict):
            raise ProviderError("Analysis provider returned malformed JSON")

        score = data.get("sentimentScore")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            score = 0
        emotions = data.get("dominantEmotions")
        actions = data.get("recommendedActions")
        return MoodAnalysis(
            detailed_analysis=clean_ai_text(data.get("detailedAnalysis")) or "Análise não disponível",
            emotional_tone=clean_ai_text(data.get("emotionalTone")) or "Neutro",
            sentiment_score=int(max(-100, min(100, score))),
            dominant_emotions=[clean_ai_text(str(e)) for e in emotions][:5] if isinstance(emotions, list) else [],
            recommended_actions=[clean_ai_text(str(a)) for a in actions][:5] if isinstance(actions, list) else [],
        )

    def generate_summary(self, content: str) -> str:
        """Summarize the text in 2-3 sentences."""
        answer = self._complete(
            "Você é um assistente especializado em criar resumos concisos de entradas de diário de saúde mental.",
            SUMMARY_PROMPT.format(content=content),
            temperature=0.5,
            max_tokens=100,
        )
        return clean_ai_text(answer) or "Sem resumo disponível"

    def extract_tags(self, content: str) -> list[str]:
        """Extract 3-5 topic tags."""
        answer = self._complete(
            "Você é um assistente especializado em extrair tags relevantes de entradas de diário de saúde mental.",
            TAGS_PROMPT.format(content=content),
            temperature=0.4,
            max_tokens=50,
        )
        return [tag.strip() for tag in clean_ai_text(answer).split(",") if tag.strip()]

    def suggest_category(self, content: str) -> str:
        """Classify the text into one of CATEGORIES."""
        answer = self._complete(
            "Você é um assistente especializado em categorizar entradas de diário de saúde mental "
            "em categorias predefinidas.",
            CATEGORY_PROMPT.format(categories=", ".join(CATEGORIES), content=content),
            temperature=0.3,
            max_tokens=50,
        )
        if answer in CATEGORIES:
            return answer
        for category in CATEGORIES:
            if category in answer:
                return category
        return DEFAULT_CATEGORY

    def generate_title(self, content: str) -> str:
        """Generate a short Title Case headline for the entry."""
        truncated = content if len(content) <= 1000 else content[:1000] + "..."
        answer = self._complete(
            "Você é um especialista em criar títulos concisos e emotivos para entradas de diário pessoal.",
            TITLE_PROMPT.format(content=truncated),
            temperature=0.6,
            max_tokens=25,
        )
        title = clean_ai_text(answer)
        title = re.sub(r"[\"“”‘’'.!?]+", "", title).strip()
        if title and not title[0].isupper():
            title = " ".join(word[:1].upper() + word[1:] for word in title.split(" "))
        if len(title) < 3 or len(title) > 60:
            return fallback_title()
        return title


_analysis_service: AnalysisService | None = None


def get_analysis_service() -> AnalysisService:
    """Get singleton analysis service instance."""
    global _analysis_service
    if _analysis_service is None:
        _analysis_service = AnalysisService()
    return _analysis_service
