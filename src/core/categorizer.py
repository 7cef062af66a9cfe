"""
Life Planner — Event Categorizer.

Assigns one of the eight fixed categories to any event that lacks one,
whether it was created from chat, imported from a calendar, or entered by
hand.

Two layers:
  1. A logistic-regression model trained once on the keyword corpus below.
  2. Whole-word keyword scoring, used when the model is not confident or
     does not recognise any word of the input.
"""

from __future__ import annotations

import logging
import re
import threading

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS, CountVectorizer
from sklearn.linear_model import LogisticRegression

from src.core.drafts import CATEGORIES, DEFAULT_CATEGORY

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.1

_TOKEN_RE = re.compile(r"[a-z0-9']+")

# ---------------------------------------------------------------------------
# Training corpus
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "work": (
        "meeting", "conference", "call", "work", "office", "business", "client",
        "project", "deadline", "presentation", "interview", "team", "workplace",
        "manager", "boss", "colleague", "corporate", "company", "job", "career",
        "professional", "office hours", "workday",
    ),
    "study": (
        "study", "class", "lecture", "homework", "exam", "test", "quiz",
        "assignment", "course", "learning", "school", "university", "college",
        "reading", "research", "thesis", "dissertation", "seminar", "workshop",
        "tutorial", "education", "academic", "student", "professor", "teacher",
    ),
    "personal": (
        "family", "personal", "birthday", "anniversary", "wedding", "shopping",
        "errand", "chore", "home", "house", "personal time", "family time",
        "parent", "child", "spouse", "relative", "household", "domestic",
    ),
    "leisure": (
        "movie", "film", "game", "gaming", "party", "dinner", "lunch", "brunch",
        "coffee", "drinks", "social", "hangout", "fun", "entertainment",
        "concert", "show", "event", "festival", "music", "theater", "comedy",
        "nightlife", "bar", "club", "friends", "socializing",
    ),
    "fitness": (
        "gym", "workout", "exercise", "running", "jogging", "fitness",
        "training", "yoga", "pilates", "cycling", "swimming", "sports",
        "basketball", "football", "soccer", "tennis", "hiking", "walking",
        "marathon", "race", "athletic", "physical", "cardio", "strength",
        "weightlifting", "crossfit",
    ),
    "health": (
        "doctor", "appointment", "dentist", "therapy", "medical", "checkup",
        "hospital", "clinic", "health", "wellness", "medication",
        "prescription", "physician", "surgeon", "nurse", "treatment",
        "diagnosis", "surgery", "therapy session", "counseling",
        "mental health",
    ),
    "travel": (
        "travel", "trip", "vacation", "flight", "airport", "hotel", "journey",
        "destination", "tour", "visit", "road trip", "cruise", "airline",
        "booking", "reservation", "itinerary", "sightseeing", "explore",
        "adventure", "holiday", "getaway", "excursion",
    ),
    "rest": (
        "rest", "sleep", "nap", "relax", "meditation", "break", "time off",
        "vacation", "holiday", "weekend", "off day", "recovery", "unwind",
        "chill", "leisure time", "downtime", "peace", "calm", "mindfulness",
    ),
}


def tokenize(text: str) -> list[str]:
    """Lower-case word tokens, minus short words, stop-words and pure numbers."""
    return [
        tok for tok in _TOKEN_RE.findall(text.lower())
        if len(tok) > 2 and tok not in ENGLISH_STOP_WORDS and not tok.isdigit()
    ]


# ---------------------------------------------------------------------------
# Trained model
# ---------------------------------------------------------------------------


class CategoryModel:
    """Logistic-regression classifier over the keyword corpus.

    Starts un-built. ``build()`` trains it exactly once, even when several
    callers race on first use; afterwards the model is read-only. Training is
    deterministic for a given corpus.
    """

    def __init__(self, keywords: dict[str, tuple[str, ...]] | None = None) -> None:
        self._keywords = keywords or CATEGORY_KEYWORDS
        self._lock = threading.Lock()
        self._vectorizer: CountVectorizer | None = None
        self._model: LogisticRegression | None = None

    @property
    def keywords(self) -> dict[str, tuple[str, ...]]:
        return self._keywords

    @property
    def is_ready(self) -> bool:
        return self._model is not None

    def build(self) -> CategoryModel:
        if self._model is not None:
            return self
        with self._lock:
            if self._model is None:
                self._vectorizer, self._model = self._train()
        return self

    def rebuild(self) -> CategoryModel:
        """Retrain from the corpus, replacing the current model atomically."""
        vectorizer, model = self._train()
        with self._lock:
            self._vectorizer, self._model = vectorizer, model
        return self

    def _train(self) -> tuple[CountVectorizer, LogisticRegression]:
        documents: list[str] = []
        labels: list[str] = []
        for category, words in self._keywords.items():
            for word in words:
                documents.append(word)
                labels.append(category)

        vectorizer = CountVectorizer(lowercase=True)
        features = vectorizer.fit_transform(documents)
        model = LogisticRegression(max_iter=1000, random_state=0)
        model.fit(features, labels)
        logger.info(
            "Category model trained on %d keywords, vocabulary size %d",
            len(documents), len(vectorizer.vocabulary_),
        )
        return vectorizer, model

    def rank(self, text: str) -> list[tuple[str, float]]:
        """Return (category, confidence) pairs, most confident first.

        Empty when the text shares no vocabulary with the corpus.
        """
        self.build()
        vectorizer, model = self._vectorizer, self._model
        features = vectorizer.transform([text])
        if features.nnz == 0:
            return []
        probabilities = model.predict_proba(features)[0]
        ranked = sorted(
            zip(model.classes_, probabilities), key=lambda pair: (-pair[1], pair[0]),
        )
        return [(str(label), float(p)) for label, p in ranked]


# ---------------------------------------------------------------------------
# Keyword scoring
# ---------------------------------------------------------------------------


def _compile_matchers(
    keywords: dict[str, tuple[str, ...]],
) -> dict[str, list[re.Pattern[str]]]:
    return {
        category: [
            re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in words
        ]
        for category, words in keywords.items()
    }


_MATCHERS = _compile_matchers(CATEGORY_KEYWORDS)


def score_keywords(text: str, matchers: dict[str, list[re.Pattern[str]]] | None = None) -> str:
    """Pick the category whose keywords match ``text`` most often.

    Ties and an all-zero score fall back to the default category.
    """
    matchers = matchers or _MATCHERS
    best_category = DEFAULT_CATEGORY
    best_score = 0
    for category, patterns in matchers.items():
        score = sum(len(p.findall(text)) for p in patterns)
        if score > best_score:
            best_category, best_score = category, score
        elif score == best_score and score > 0:
            best_category = DEFAULT_CATEGORY
    return best_category


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class EventCategorizer:
    """Classify event text into one of CATEGORIES. Never returns None."""

    def __init__(
        self,
        model: CategoryModel | None = None,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._model = model or CategoryModel()
        self._threshold = threshold
        self._matchers = _MATCHERS if model is None else _compile_matchers(model.keywords)

    @property
    def model(self) -> CategoryModel:
        return self._model

    def categorize(self, summary: str = "", description: str = "", location: str = "") -> str:
        text = " ".join(part for part in (summary, description, location) if part).lower().strip()
        if not text:
            return DEFAULT_CATEGORY

        if not tokenize(text):
            return DEFAULT_CATEGORY

        try:
            ranked = self._model.rank(text)
        except Exception as exc:
            logger.error("Category model failed, using keyword scoring: %s", exc)
            ranked = []

        if ranked:
            label, confidence = ranked[0]
            if confidence > self._threshold and label in CATEGORIES:
                logger.debug("Categorized %r as %s (%.2f)", text[:60], label, confidence)
                return label

        return score_keywords(text, self._matchers)

    def categorize_events(self, events: list[dict], force: bool = False) -> list[dict]:
        """Return copies of ``events`` with a ``category`` filled in.

        Events that already carry a valid category keep it unless ``force``.
        """
        categorized: list[dict] = []
        for ev in events:
            current = ev.get("category")
            if not force and current in CATEGORIES:
                categorized.append(dict(ev))
                continue
            category = self.categorize(
                ev.get("summary") or "",
                ev.get("description") or "",
                ev.get("location") or "",
            )
            categorized.append({**ev, "category": category})
        logger.info("Categorized %d events (force=%s)", len(categorized), force)
        return categorized
