from __future__ import annotations

import random


WORD_CATEGORIES: dict[str, list[str]] = {
    "animals": ["Cat", "Dog", "Elephant", "Lion", "Tiger", "Bear", "Bird", "Fish", "Butterfly", "Spider"],
    "objects": ["House", "Car", "Phone", "Book", "Pizza", "Cake", "Guitar", "Piano", "Camera", "Computer"],
    "nature": ["Tree", "Sun", "Moon", "Star", "Flower", "Mountain", "Ocean", "Rainbow", "Cloud", "Snow"],
    "activities": ["Running", "Dancing", "Singing", "Painting", "Swimming", "Basketball", "Football", "Tennis", "Cooking", "Reading"],
}

DEFAULT_WORDS: list[str] = [w for words in WORD_CATEGORIES.values() for w in words]


def pick_words(words: list[str], count: int) -> list[str]:
    # Dedup while keeping order, then sample.
    unique = list(dict.fromkeys(w for w in words if w))
    if count <= 0 or not unique:
        return []
    if count >= len(unique):
        return random.sample(unique, len(unique))
    return random.sample(unique, count)
