"""Keyword-based intent and topic classification of user messages."""

from .matching import matches_any
from .models import ConversationStyle, IntentTag, TopicTag

# Order matters: the first matching category wins, so a message such as
# "sleep and stress" is classified as sleep optimization.
INTENT_KEYWORDS: tuple[tuple[IntentTag, tuple[str, ...]], ...] = (
    (IntentTag.BIOMARKER_ANALYSIS, (
        "biomarker", "lab result", "lab test", "blood test", "blood work", "bloodwork",
        "cholesterol", "glucose", "hba1c", "a1c", "ldl", "hdl", "triglyceride",
        "creatinine", "crp", "test result", "my results",
    )),
    (IntentTag.NUTRITION_GUIDANCE, (
        "diet", "food", "eating", "nutrition", "meal", "calorie", "protein",
        "carb", "vegetable", "fruit", "recipe", "breakfast", "lunch", "dinner",
    )),
    (IntentTag.FITNESS_GUIDANCE, (
        "exercise", "workout", "training", "fitness", "running", "cardio",
        "strength", "gym", "walking", "steps", "hiit", "yoga",
    )),
    (IntentTag.SLEEP_OPTIMIZATION, (
        "sleep", "insomnia", "bedtime", "tired", "circadian", "wake up", "nap",
    )),
    (IntentTag.STRESS_MANAGEMENT, (
        "stress", "anxiety", "anxious", "overwhelm", "burnout", "relax",
        "meditation", "mindfulness", "cortisol",
    )),
    (IntentTag.SUPPLEMENT_GUIDANCE, (
        "supplement", "vitamin", "mineral", "magnesium", "omega", "zinc",
        "probiotic", "creatine", "fish oil",
    )),
    (IntentTag.SYMPTOM_DISCUSSION, (
        "symptom", "pain", "ache", "dizzy", "nausea", "fever", "cough",
        "rash", "fatigue", "hurt", "swelling", "shortness of breath",
    )),
)

TOPIC_KEYWORDS: tuple[tuple[TopicTag, tuple[str, ...]], ...] = (
    (TopicTag.CARDIOVASCULAR, (
        "heart", "cholesterol", "blood pressure", "cardio", "ldl", "hdl",
        "triglyceride", "artery", "arteries",
    )),
    (TopicTag.METABOLIC, (
        "glucose", "insulin", "blood sugar", "hba1c", "a1c", "metabolic",
        "diabetes", "diabetic", "weight",
    )),
    (TopicTag.NUTRITION, (
        "diet", "food", "nutrition", "meal", "eating", "protein", "calorie",
        "carb", "vegetable",
    )),
    (TopicTag.EXERCISE, (
        "exercise", "workout", "fitness", "training", "gym", "running",
        "walking", "strength", "steps",
    )),
    (TopicTag.SLEEP, ("sleep", "insomnia", "bedtime", "tired", "circadian")),
    (TopicTag.STRESS, (
        "stress", "anxiety", "anxious", "burnout", "meditation", "cortisol",
    )),
    (TopicTag.SUPPLEMENTS, (
        "supplement", "vitamin", "magnesium", "omega", "zinc", "probiotic",
        "fish oil",
    )),
    (TopicTag.LIVER, ("liver", "alt", "ast", "bilirubin", "hepatic", "ggt")),
    (TopicTag.KIDNEY, ("kidney", "creatinine", "egfr", "renal", "bun", "urine")),
)

STYLE_CUES: tuple[tuple[ConversationStyle, tuple[str, ...]], ...] = (
    (ConversationStyle.CONCISE, (
        "briefly", "brief answer", "short answer", "keep it short", "tl;dr",
        "in short", "quick answer", "just the summary",
    )),
    (ConversationStyle.TECHNICAL, (
        "technical", "mechanism", "pathway", "physiology", "cite studies",
        "the research", "the evidence", "biochemistry",
    )),
    (ConversationStyle.DETAILED, (
        "in detail", "explain more", "elaborate", "walk me through",
    )),
)


def classify_intent(text: str) -> IntentTag:
    """Return the first intent whose keyword set matches ``text``."""
    for intent, keywords in INTENT_KEYWORDS:
        if matches_any(text, keywords):
            return intent
    return IntentTag.GENERAL_HEALTH


def extract_topics(text: str) -> set[TopicTag]:
    """Return every topic whose keyword set matches ``text``."""
    return {topic for topic, keywords in TOPIC_KEYWORDS if matches_any(text, keywords)}


def infer_conversation_style(text: str) -> ConversationStyle | None:
    """Detect an explicit request for a different answer style, if any."""
    for style, cues in STYLE_CUES:
        if matches_any(text, cues):
            return style
    return None
