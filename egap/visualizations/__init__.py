from egap.visualizations.base import Canvas, Font, RenderContext
from egap.visualizations.infographic import (
    compose_infographic,
    render_delegation,
)
from egap.visualizations.sentence import Phrase, Sentence, SentenceWriter


__all__ = [
    "Canvas",
    "Font",
    "RenderContext",
    "Phrase",
    "Sentence",
    "SentenceWriter",
    "compose_infographic",
    "render_delegation",
]
