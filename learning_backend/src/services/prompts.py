SYSTEM_INSTRUCTION = (
    "You are an expert cybersecurity and computer science educator. "
    "You always answer with a single JSON object and nothing else."
)

NOTES_PROMPT = """
Write structured study notes on the topic: {topic}

Return ONLY a JSON object with these fields:
- "type": "study_notes"
- "title": a short title for the notes
- "tl;dr": a one or two sentence summary
- "body_md": the full notes as a Markdown string (headings, bullet points, short code samples where useful)

Cover the core concepts, how it works, common pitfalls and how to defend against or avoid them.
""".strip()

# First line of every quiz prompt; lets offline oracles tell the two stages apart.
QUIZ_PROMPT_HEADER = "Write a multiple-choice quiz on the topic:"

QUIZ_PROMPT = (QUIZ_PROMPT_HEADER + """ {topic}

Base the questions on these study notes:
---
{notes}
---

Requirements:
- exactly {count} questions
- mixed difficulty: some easy, some medium, some hard
- each question has exactly 4 options labelled A, B, C and D

Return ONLY a JSON object with these fields:
- "type": "quiz"
- "title": a short title for the quiz
- "questions": an array of objects, each with
  - "question": the question text
  - "options": an object {{"A": "...", "B": "...", "C": "...", "D": "..."}}
  - "answer": the letter of the correct option
  - "explanation": one or two sentences explaining the answer
""").strip()

QUIZ_QUESTION_COUNT = 8


def notes_prompt(topic: str) -> str:
    return NOTES_PROMPT.format(topic=topic)


def quiz_prompt(topic: str, notes_body: str, count: int = QUIZ_QUESTION_COUNT) -> str:
    return QUIZ_PROMPT.format(topic=topic, notes=notes_body, count=count)


def is_quiz_prompt(prompt: str) -> bool:
    return prompt.startswith(QUIZ_PROMPT_HEADER)
