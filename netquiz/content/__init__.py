from netquiz.content.loader import load_questions, question_from_dict

__all__ = ["load_questions", "question_from_dict"]
