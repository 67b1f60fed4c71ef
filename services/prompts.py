# services/prompts.py
"""Prompt construction for summary and quiz generation.

Everything here is pure string building; providers decide how the prompt is
delivered (next to an uploaded file, or followed by extracted text).
"""
import textwrap

SYSTEM_SUMMARIZER = (
    "You are a professional document summarizer. "
    "Provide accurate, well-structured summaries based on the document content."
)

SYSTEM_QUIZ = (
    "You are an expert educational content creator. "
    "Generate high-quality quiz questions based on document content."
)

# text-only providers cannot declare a response schema, so they ask for JSON in words
SYSTEM_QUIZ_JSON = SYSTEM_QUIZ + " Always respond with valid JSON only, no additional text."

LANGUAGE_NAMES = {
    "en": "English",
    "id": "Indonesian (Bahasa Indonesia)",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "zh": "Chinese",
    "ja": "Japanese",
    "ko": "Korean",
    "ar": "Arabic",
    "pt": "Portuguese",
}

DEFAULT_LANGUAGE_NAME = "English"

SUMMARY_TYPES = ("concise", "detailed", "bullet_points", "abstract")
DIFFICULTIES = ("easy", "medium", "hard")
QUESTION_TYPES = ("multiple_choice", "true_false", "mixed")
MIN_QUESTIONS = 5
MAX_QUESTIONS = 50

_SUMMARY_TEMPLATES = {
    "concise": (
        "Analyze the document '{name}' and provide a concise summary (2-3 paragraphs) that "
        "captures the main points, key concepts, and essential information. Focus on the most "
        "important ideas presented in the document."
    ),
    "detailed": (
        "Analyze the document '{name}' and create a comprehensive, detailed summary that covers "
        "all major sections, key arguments, supporting evidence, and important details. Organize "
        "the summary logically with clear sections. The summary should be thorough enough that "
        "someone could understand the document's full scope without reading it."
    ),
    "bullet_points": (
        "Analyze the document '{name}' and create a structured bullet-point summary. "
        "Use clear bullet points (•) to list:\n"
        "• Main topics and themes\n"
        "• Key concepts and definitions\n"
        "• Important findings and conclusions\n"
        "• Practical applications\n"
        "• Critical insights and takeaways\n"
        "Keep each bullet point concise but informative."
    ),
    "abstract": (
        "Analyze the document '{name}' and write a formal academic-style abstract (150-250 words) "
        "that includes: the document's purpose, methodology or approach, key findings, and "
        "conclusions. Use formal academic language appropriate for a research paper abstract."
    ),
}

_DIFFICULTY_LEVELS = {
    "easy": "basic concepts and fundamental understanding",
    "medium": "application of concepts and analytical thinking",
    "hard": "complex analysis, synthesis, and critical evaluation",
}


def _language_key(language) -> str:
    # codes are stored as given; lookups ignore case and surrounding space
    return (language or "").strip().lower()


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(_language_key(language), DEFAULT_LANGUAGE_NAME)


def true_false_options(language: str) -> list:
    """Fixed option labels for true/false questions."""
    return ["Benar", "Salah"] if _language_key(language) == "id" else ["True", "False"]


def _quoted(options: list) -> str:
    return "[" + ", ".join(f"'{o}'" for o in options) + "]"


def build_summary_prompt(summary_type: str, file_name: str, language: str = "id") -> str:
    name = language_name(language)
    body = _SUMMARY_TEMPLATES.get(summary_type, _SUMMARY_TEMPLATES["concise"])
    return (
        body.format(name=file_name)
        + f"\n\nIMPORTANT: Write the entire summary in {name}. All text must be in {name}."
    )


def _type_description(question_type: str, tf: str) -> str:
    if question_type == "true_false":
        return f"true/false questions. Each question must have EXACTLY 2 answer options: {tf}."
    if question_type == "mixed":
        return (
            "a mix of multiple-choice and true/false questions. Multiple-choice questions must "
            f"have EXACTLY 4 options. True/false questions must have EXACTLY 2 options: {tf}. "
            "Mix them roughly equally."
        )
    return "multiple-choice questions. Each question must have EXACTLY 4 answer options."


def _format_rules(question_type: str, tf: str) -> str:
    if question_type == "true_false":
        return (
            "- Each question MUST have exactly 2 options\n"
            f"- Options must be exactly {tf}\n"
            "- correct_answer must be 0 (first option) or 1 (second option)"
        )
    if question_type == "mixed":
        return (
            "- For multiple-choice questions: provide exactly 4 options, correct_answer index 0-3\n"
            f"- For true/false questions: provide exactly 2 options {tf}, correct_answer 0 or 1\n"
            "- Mix roughly equal numbers of both types\n"
            "- Add a 'type' field to each question: 'multiple_choice' or 'true_false'"
        )
    return (
        "- Each question must have exactly 4 options\n"
        "- correct_answer index must be 0-3\n"
        "- Mix the position of correct answers (don't always make it option A/0)"
    )


def _json_example(question_type: str, tf_options: list) -> str:
    tf = ", ".join(f'"{o}"' for o in tf_options)
    if question_type == "true_false":
        items = [
            '{"id": 1, "question": "Question text here", "options": [%s], '
            '"correct_answer": 0, "explanation": "Brief explanation of the correct answer"}' % tf
        ]
    elif question_type == "mixed":
        items = [
            '{"id": 1, "question": "Multiple choice question text", "type": "multiple_choice", '
            '"options": ["Option A", "Option B", "Option C", "Option D"], '
            '"correct_answer": 0, "explanation": "Explanation for multiple choice"}',
            '{"id": 2, "question": "True/false question text", "type": "true_false", '
            '"options": [%s], "correct_answer": 1, "explanation": "Explanation for true/false"}' % tf,
        ]
    else:
        items = [
            '{"id": 1, "question": "Question text here", '
            '"options": ["Option A", "Option B", "Option C", "Option D"], '
            '"correct_answer": 0, "explanation": "Brief explanation of the correct answer"}'
        ]
    return '{"questions": [\n  ' + ",\n  ".join(items) + "\n]}"


def build_quiz_prompt(question_count: int, difficulty: str, question_type: str, file_name: str,
                      language: str = "id", *, include_json_example: bool = False) -> str:
    """Build the quiz instruction.

    `include_json_example` appends an explicit response shape for providers
    that cannot enforce a schema on the model output.
    """
    name = language_name(language)
    tf_options = true_false_options(language)
    tf = _quoted(tf_options)
    level = _DIFFICULTY_LEVELS.get(difficulty, _DIFFICULTY_LEVELS["medium"])

    prompt = textwrap.dedent("""\
        Analyze the document '{file_name}' and generate exactly {count} {type_desc}

        Difficulty Level: {difficulty}
        Questions should test {level}

        Requirements:
        - All questions must be based on the actual content of the document
        - Questions must be answerable from the document alone
        - Each question should have a clear, unambiguous answer
        {rules}
        - Provide a brief explanation for each correct answer
        - Ensure questions cover different parts/topics of the document
        - Use clear, professional language
        - Number questions sequentially starting from 1

        IMPORTANT: Write ALL questions, options, and explanations in {lang}. Every piece of text must be in {lang}.
        """).format(
        file_name=file_name,
        count=question_count,
        type_desc=_type_description(question_type, tf),
        difficulty=difficulty,
        level=level,
        rules=_format_rules(question_type, tf),
        lang=name,
    )

    if include_json_example:
        prompt += (
            "\nReturn the response as JSON with this exact structure:\n"
            + _json_example(question_type, tf_options)
            + "\n"
        )

    return prompt + "\nGenerate questions that would genuinely test someone's understanding of the document content."
