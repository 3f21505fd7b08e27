from .probe import collect_signals, check_llms, normalize_target, ensure_public_target
from .score_calculator import calculate_score, compose_feedback, evaluate, score_rating, generate_summary
from .report_renderer import document_from_result, layout, render_pdf
