from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..game.words import DEFAULT_WORDS, WORD_CATEGORIES, pick_words

bp = Blueprint("words", __name__)


@bp.get("/words")
def get_words():
    default_count = current_app.config.get("WORD_CHOICES_COUNT", 3)
    try:
        count = int(request.args.get("count", default_count))
    except ValueError:
        count = default_count

    category = request.args.get("category", "").strip().lower()
    if category and category not in WORD_CATEGORIES:
        return jsonify({"error": "unknown_category", "categories": sorted(WORD_CATEGORIES)}), 404

    words = WORD_CATEGORIES[category] if category else DEFAULT_WORDS
    return jsonify({"words": pick_words(words, count), "categories": sorted(WORD_CATEGORIES)})


@bp.get("/words/categories")
def get_categories():
    return jsonify({"categories": WORD_CATEGORIES})
