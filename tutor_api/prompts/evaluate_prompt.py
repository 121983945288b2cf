# tutor_api/prompts/evaluate_prompt.py
from tutor_api.prompts.languages import get_ai_language_instruction
from tutor_api.schemas.evaluate import EvaluateRequest


def build_system_prompt(language: str) -> str:
    return f"""You are a math teacher evaluating a student's answer. Your task is to:
1. Determine if the student's answer is mathematically correct (equivalent to the expected answer)
2. If incorrect, provide a clear step-by-step solution
3. Provide brief feedback

{get_ai_language_instruction(language)}

You MUST respond with valid JSON only, no other text. Use this exact schema:
{{
  "is_correct": boolean,
  "solution_steps": ["step 1", "step 2", ...],
  "short_feedback": "brief encouraging feedback"
}}

Rules:
- "is_correct": true if the student's answer is mathematically equivalent to the correct answer (e.g., "0.5" = "1/2")
- "solution_steps": If correct, return ["Your answer is correct!"]. If incorrect, return 3-5 clear steps showing the solution.
- "short_feedback": 1-2 sentences. Be encouraging but honest.
- Keep all JSON keys in English (is_correct, solution_steps, short_feedback)."""


def build_user_prompt(req: EvaluateRequest) -> str:
    explanation = f"Student's explanation: {req.student_explanation}" if req.student_explanation else ""
    return f"""Question: {req.question_prompt}
Correct answer: {req.correct_answer}
Student's answer: {req.student_answer}
{explanation}

Evaluate this answer and respond with JSON only."""
