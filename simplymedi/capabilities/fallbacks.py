"""Deterministic last-tier responders, one per capability.

None of these functions touches the network or raises on well-formed input;
they are what every capability chain ends with.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from simplymedi.capabilities.models import (
    ChatInput,
    EntitiesInput,
    HealthRecommendations,
    MedicalEntity,
    RecommendInput,
    RiskAnalysis,
    RiskInput,
    RiskLevel,
    SimplifyInput,
    SummarizeInput,
)

CONSULT_NOTICE = "Please consult with your healthcare provider for proper evaluation."


def simplify(payload: SimplifyInput) -> str:
    return payload.text


def extract_entities(payload: EntitiesInput) -> list[MedicalEntity]:
    _ = payload
    return []


class RiskKeywordScanner:
    """Keyword-based risk rating over report text and its structured fields."""

    def __init__(self, high_keywords: Sequence[str], medium_keywords: Sequence[str]) -> None:
        self._high = [keyword.lower() for keyword in high_keywords]
        self._medium = [keyword.lower() for keyword in medium_keywords]

    def __call__(self, payload: RiskInput) -> RiskAnalysis:
        haystack = f"{payload.text}\n{payload.fields.searchable_text()}".lower()
        high = [keyword for keyword in self._high if keyword in haystack]
        medium = [keyword for keyword in self._medium if keyword in haystack]

        explanation = "Basic risk assessment based on available data. "
        if high:
            level = RiskLevel.HIGH
            explanation += f"Potential concerns identified: {', '.join(high)}. "
        elif medium:
            level = RiskLevel.MEDIUM
            explanation += f"Some indicators require monitoring: {', '.join(medium)}. "
        else:
            level = RiskLevel.LOW
        return RiskAnalysis(risk_level=level, explanation=explanation + CONSULT_NOTICE)


def recommend(payload: RecommendInput) -> HealthRecommendations:
    dietary = [
        "Mediterranean diet: fruits, vegetables, whole grains",
        "Adequate hydration: 8-10 glasses water daily",
        "Limit processed foods, sodium <2300mg/day",
    ]
    lifestyle = [
        "Sleep hygiene: 7-9 hours nightly",
        "Stress management: relaxation techniques",
        "Smoking cessation, alcohol moderation",
    ]
    exercise = [
        "Aerobic activity: 150 min/week moderate intensity",
        "Resistance training: 2 sessions/week",
        "Progressive activity increase per tolerance",
    ]
    follow_up = [
        "Regular physician follow-up",
        "Symptom monitoring and documentation",
        "Medication adherence tracking",
    ]
    warning_signs = [
        "Acute symptom onset or worsening",
        "Severe pain (>7/10 scale)",
        "Vital sign abnormalities",
    ]

    age = _profile_age(payload)
    if age is not None and age > 65:
        exercise.append("Focus on balance and flexibility exercises to prevent falls")
        follow_up.append("Consider more frequent health screenings")
    if age is not None and age < 30:
        lifestyle.append("Establish healthy habits early for long-term wellness")

    return HealthRecommendations(
        dietary=dietary,
        lifestyle=lifestyle,
        exercise=exercise,
        follow_up_actions=follow_up,
        warning_signs_to_watch=warning_signs,
    )


def _profile_age(payload: RecommendInput) -> int | None:
    raw: Any = payload.profile.get("age")
    if raw is None:
        raw = payload.fields.age
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def summarize(payload: SummarizeInput) -> str:
    source = payload.simplified_text or payload.original_text or ""
    terms = [entity.text for entity in payload.medical_terms][:5]
    terms_text = ", ".join(terms) if terms else "None identified"
    excerpt = source[:150].strip()
    return (
        f"Your medical report ({len(source)} characters) has been processed successfully. "
        f"Key terms found: {terms_text}. "
        f"{excerpt}... "
        "Please consult your healthcare provider for detailed interpretation."
    )


@dataclass(frozen=True)
class ChatTopic:
    """Canned answer selected when every term of any trigger group appears."""

    name: str
    triggers: tuple[tuple[str, ...], ...]
    response: str

    def matches(self, message: str) -> bool:
        return any(all(term in message for term in group) for group in self.triggers)


_BLOOD_PRESSURE_TRIGGERS = (("blood pressure",), ("bp",), ("hypertension",))

CHAT_TOPICS: tuple[ChatTopic, ...] = (
    ChatTopic(
        name="blood_pressure_elevated",
        triggers=tuple(
            group + (qualifier,)
            for group in _BLOOD_PRESSURE_TRIGGERS
            for qualifier in ("high", "elevated")
        ),
        response=(
            "**Elevated Blood Pressure Management:**\n\n"
            "- Monitor BP regularly and aim for <120/80 mmHg\n"
            "- Reduce sodium intake (<2,300mg/day)\n"
            "- Exercise 150 min/week at moderate intensity\n"
            "- Maintain a healthy BMI and manage stress\n\n"
            "**Consult your healthcare provider for a personalized treatment plan.**"
        ),
    ),
    ChatTopic(
        name="blood_pressure_symptoms",
        triggers=tuple(group + ("symptom",) for group in _BLOOD_PRESSURE_TRIGGERS),
        response=(
            "**Hypertension Symptoms:**\n\n"
            "- Early stage: usually no symptoms\n"
            "- Advanced: headaches, dizziness, blurred vision\n"
            "- Severe: chest pain, confusion, breathing difficulty\n\n"
            "**Seek immediate care for severe symptoms. Regular monitoring is essential.**"
        ),
    ),
    ChatTopic(
        name="blood_pressure",
        triggers=_BLOOD_PRESSURE_TRIGGERS,
        response=(
            "**Blood Pressure Assessment:**\n\n"
            "- Normal range: <120/80 mmHg\n"
            "- Regular monitoring recommended\n"
            "- Risk stratification requires clinical evaluation\n\n"
            "**Consult your healthcare provider for a personalized assessment.**"
        ),
    ),
    ChatTopic(
        name="diabetes",
        triggers=(("diabetes",), ("blood sugar",), ("glucose",)),
        response=(
            "**Diabetes Management Guidelines:**\n\n"
            "- Monitor blood glucose as prescribed\n"
            "- Keep a controlled carbohydrate diet\n"
            "- Exercise regularly (150 min/week)\n"
            "- Inspect feet daily and keep up regular screenings\n\n"
            "**Consult your healthcare provider for an individualized management plan.**"
        ),
    ),
    ChatTopic(
        name="tuberculosis",
        triggers=(
            ("tuberculosis",),
            ("tb",),
            ("cough", "persistent"),
            ("cough", "chronic"),
        ),
        response=(
            "**Tuberculosis Assessment:**\n\n"
            "- Common symptoms: persistent cough (>3 weeks), night sweats, weight loss\n"
            "- Advanced: coughing up blood, fever, fatigue\n"
            "- Risk factors: HIV, diabetes, malnutrition, close contact\n\n"
            "**Persistent respiratory symptoms require prompt medical evaluation and testing.**"
        ),
    ),
    ChatTopic(
        name="heart",
        triggers=(("heart",), ("cardiac",), ("chest pain",)),
        response=(
            "**Cardiovascular Health:**\n\n"
            "- Heart-healthy diet: fruits, vegetables, lean proteins\n"
            "- Regular physician-approved exercise\n"
            "- Stop smoking and limit alcohol\n"
            "- Keep blood pressure and cholesterol under control\n\n"
            "**Chest pain or shortness of breath requires immediate medical attention.**"
        ),
    ),
    ChatTopic(
        name="weight",
        triggers=(("weight",), ("obesity",), ("overweight",)),
        response=(
            "**Weight Management:**\n\n"
            "- Target a gradual loss of 0.5-1 kg per week\n"
            "- Caloric deficit with balanced nutrition\n"
            "- Regular physical activity (150 min/week)\n"
            "- Adequate hydration and sleep\n\n"
            "**Consult your physician before starting a weight loss program.**"
        ),
    ),
    ChatTopic(
        name="pain",
        triggers=(("pain",), ("ache",), ("hurt",)),
        response=(
            "**Pain Management Guidelines:**\n\n"
            "- Ice for acute injury (24-48 hrs), heat for chronic pain\n"
            "- Over-the-counter pain relief per package instructions\n"
            "- Gentle movement and proper positioning\n"
            "- Adjust activity as tolerated\n\n"
            "**Severe or persistent pain requires medical evaluation.**"
        ),
    ),
    ChatTopic(
        name="medication",
        triggers=(("medication",), ("medicine",), ("drug",)),
        response=(
            "**Medication Safety:**\n\n"
            "- Take medicines as prescribed and do not change doses on your own\n"
            "- Watch for side effects and drug interactions\n"
            "- Store properly and check expiration dates\n"
            "- Keep a current medication list for all your providers\n\n"
            "**Dosage changes require medical supervision.**"
        ),
    ),
    ChatTopic(
        name="report",
        triggers=(("report",), ("test",), ("lab",), ("result",)),
        response=(
            "**Understanding Medical Reports:**\n\n"
            "- Normal ranges can vary between laboratories\n"
            "- Abnormal results do not always indicate serious problems\n"
            "- Trends over time often matter more than single values\n"
            "- Some results may need follow-up testing\n\n"
            "**Discuss your reports with your healthcare provider for proper interpretation.**"
        ),
    ),
    ChatTopic(
        name="exercise",
        triggers=(("exercise",), ("workout",), ("fitness",)),
        response=(
            "**General Exercise Recommendations:**\n\n"
            "- At least 150 minutes of moderate aerobic activity per week\n"
            "- Strength training twice a week\n"
            "- Start slowly and increase intensity gradually\n"
            "- Stay hydrated and rest when needed\n\n"
            "**Consult your healthcare provider before starting a new exercise program.**"
        ),
    ),
    ChatTopic(
        name="diet",
        triggers=(("diet",), ("nutrition",), ("food",), ("eat",)),
        response=(
            "**General Nutrition Guidelines:**\n\n"
            "- Eat a variety of fruits and vegetables\n"
            "- Choose whole grains and lean proteins\n"
            "- Limit processed foods, added sugars and sodium\n"
            "- Control portion sizes and drink water\n\n"
            "**Consider a registered dietitian for personalized nutrition advice.**"
        ),
    ),
    ChatTopic(
        name="mental_health",
        triggers=(("stress",), ("anxiety",), ("depression",), ("mental health",)),
        response=(
            "**Mental Health and Stress:**\n\n"
            "- Practice relaxation techniques such as deep breathing or meditation\n"
            "- Keep a regular sleep schedule and stay physically active\n"
            "- Stay connected with supportive friends and family\n"
            "- Consider professional counseling if needed\n\n"
            "**For persistent concerns, reach out to a mental health professional.**"
        ),
    ),
    ChatTopic(
        name="sleep",
        triggers=(("sleep",), ("insomnia",), ("tired",), ("fatigue",)),
        response=(
            "**Better Sleep:**\n\n"
            "- Keep a consistent sleep schedule\n"
            "- Keep the bedroom cool, dark and quiet\n"
            "- Avoid screens, caffeine and large meals before bedtime\n"
            "- Exercise regularly, but not close to bedtime\n\n"
            "**If sleep problems persist, consult your healthcare provider.**"
        ),
    ),
)

DEFAULT_CHAT_RESPONSE = (
    "**Clinical Assessment Required:**\n\n"
    "- Symptom evaluation requires medical examination\n"
    "- Individual risk factors and history need review\n"
    "- Diagnostic testing may be indicated\n\n"
    "**Consult your healthcare provider for proper evaluation and treatment planning.**"
)


def chat(payload: ChatInput) -> str:
    message = payload.message.lower()
    for topic in CHAT_TOPICS:
        if topic.matches(message):
            return topic.response
    return DEFAULT_CHAT_RESPONSE
