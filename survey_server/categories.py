"""Topic checklist shown before recommendations (AI / ML research areas)."""

from typing import List

CATEGORIES: List[str] = [
    "machine_learning",
    "deep_learning",
    "supervised_learning",
    "unsupervised_learning",
    "semi_supervised_learning",
    "self_supervised_learning",
    "reinforcement_learning",
    "multi_agent_systems",
    "natural_language_processing",
    "information_retrieval",
    "speech_recognition",
    "text_to_speech",
    "computer_vision",
    "image_processing",
    "video_understanding",
    "generative_models",
    "diffusion_models",
    "gans",
    "transformers",
    "graph_machine_learning",
    "knowledge_graphs",
    "recommendation_systems",
    "time_series_forecasting",
    "anomaly_detection",
    "causal_inference",
    "bayesian_machine_learning",
    "meta_learning",
    "continual_learning",
    "transfer_learning",
    "few_shot_learning",
    "explainable_ai",
    "fairness_bias_ethics",
    "privacy_preserving_ml",
    "federated_learning",
    "neuro_symbolic_ai",
    "evolutionary_computation",
    "optimization_for_ml",
    "robotics",
    "planning_and_reasoning",
    "autonomous_driving",
    "mlops",
    "automl",
    "edge_ai",
    "embedded_ai",
    "aigc_content_generation",
    "prompt_engineering",
    "agentic_workflows",
]


def normalize_category(name: str) -> str:
    """Custom categories typed by users: trimmed, lowercase, spaces to underscores."""
    return "_".join(name.strip().lower().split())


def categories_to_topic(categories: List[str]) -> str:
    return ", ".join(c for c in (normalize_category(c) for c in categories) if c)


def topic_to_categories(topic: str) -> List[str]:
    return [c.strip() for c in (topic or "").split(",") if c.strip()]
