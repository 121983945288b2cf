# tutor_api/prompts/languages.py
"""
AI 출력 언어별 지시문.
JSON 키/ID는 항상 영어로 고정하고, 사용자에게 보이는 문자열 값만 번역하도록 요구한다.
"""
from tutor_api.core.constants import LanguageCodes

_INSTRUCTIONS = {
    LanguageCodes.HI_LATN: (
        "IMPORTANT: All user-facing text in your response MUST be written in Roman Hindi (Hinglish) "
        "- Hindi written in Latin script.\n"
        "Use natural Roman Hindi/Hinglish as spoken by students in India.\n"
        "MINIMIZE English words - only use these unavoidable math terms in English: fraction, numerator, "
        "denominator, common denominator, equation, variable, coefficient, positive, negative, add, "
        "subtract, multiply, divide.\n"
        "All other words should be Hindi in Latin script: hai, nahi, karo, dhundho, pehle, phir, sirf, etc.\n"
        'Example: "Acha try hai, lekin pehle common denominator dhundho. Phir sirf numerators ko add karo."\n'
        'Example: "Yeh galat hai kyunki aapne denominators ko bhi add kar diya."\n'
        "Do NOT use Devanagari script (हिंदी). Keep JSON keys in English but values in Roman Hindi."
    ),
    LanguageCodes.ES: (
        "IMPORTANT: All user-facing text in your response must be written in Spanish (Español).\n"
        "Use clear, simple Spanish appropriate for middle school students.\n"
        "Keep JSON keys in English."
    ),
    LanguageCodes.FR: (
        "IMPORTANT: All user-facing text in your response must be written in French (Français).\n"
        "Use clear, simple French appropriate for middle school students.\n"
        'Use "tu" instead of "vous" for a friendly tone.\n'
        "Keep JSON keys in English."
    ),
    LanguageCodes.ZH_HANS: (
        "IMPORTANT: All user-facing text in your response must be written in Simplified Chinese (简体中文).\n"
        "Use clear, simple Chinese appropriate for middle school students.\n"
        "Keep JSON keys in English."
    ),
}

_DEFAULT_INSTRUCTION = "All user-facing text should be in English."


def get_ai_language_instruction(language: str) -> str:
    return _INSTRUCTIONS.get(language, _DEFAULT_INSTRUCTION)
