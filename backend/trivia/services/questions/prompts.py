"""Prompt templates used for OpenAI interactions."""

QUIZ_PROMPT = (
    "Kamu adalah pembuat kuis trivia.\n\n"
    "Buat tepat {count} soal pilihan ganda berbahasa Indonesia dengan tema: {theme}.\n"
    "Setiap soal memiliki empat pilihan jawaban berlabel A, B, C, dan D, "
    "dan hanya satu yang benar.\n\n"
    "Balas HANYA dengan array JSON, tanpa teks lain, dengan format:\n"
    '[{{"question": "...", "options": {{"A": "...", "B": "...", "C": "...", "D": "..."}}, "answer": "A"}}]'
)
