"""Date-night ideas — a fixed pool of suggestions, picked at random.

Backs the /dateidea command. Like the reminder copy, selection goes through
an injected random.Random.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

CATEGORY_LABELS: dict[str, str] = {
    "home": "Home",
    "going-out": "Going Out",
    "adventure": "Adventure",
    "quick": "Quick",
}

CATEGORY_EMOJIS: dict[str, str] = {
    "home": "🏠",
    "going-out": "🌆",
    "adventure": "🏔️",
    "quick": "⚡",
}


@dataclass(frozen=True)
class DateIdea:
    title: str
    description: str
    category: str   # one of CATEGORY_LABELS


DATE_IDEAS: tuple[DateIdea, ...] = (
    DateIdea("Cook Together", "Pick a new recipe and make it together from scratch", "home"),
    DateIdea("Movie Marathon", "Watch a trilogy or themed movies with snacks", "home"),
    DateIdea("Game Night", "Board games, card games, or video games together", "home"),
    DateIdea("Spa Night", "Face masks, massages, and relaxation at home", "home"),
    DateIdea("Stargazing", "Set up blankets in the backyard and watch the stars", "home"),
    DateIdea("Indoor Picnic", "Spread a blanket indoors with fancy finger foods", "home"),
    DateIdea("Photo Album Night", "Go through old photos together and share memories", "home"),
    DateIdea("Learn Something New", "Watch a tutorial and try a new skill together", "home"),
    DateIdea("Puzzle Night", "Work on a jigsaw puzzle together with music", "home"),
    DateIdea("Wine & Paint", "Set up canvases and paint while enjoying drinks", "home"),
    DateIdea("Fancy Dinner", "Dress up and try a nice restaurant", "going-out"),
    DateIdea("Live Music", "Find a local concert, jazz bar, or open mic", "going-out"),
    DateIdea("Museum Visit", "Explore an art, history, or science museum", "going-out"),
    DateIdea("Comedy Show", "Catch a stand-up comedy performance", "going-out"),
    DateIdea("Farmers Market", "Browse the market and pick ingredients for dinner", "going-out"),
    DateIdea("Bookstore Date", "Pick out books for each other to read", "going-out"),
    DateIdea("Dancing", "Go dancing or take a dance class together", "going-out"),
    DateIdea("Escape Room", "Work together to solve puzzles and escape", "going-out"),
    DateIdea("Food Tour", "Try multiple restaurants in a neighborhood", "going-out"),
    DateIdea("Bowling Night", "Old school fun with friendly competition", "going-out"),
    DateIdea("Hiking Trip", "Explore a new trail with a packed lunch", "adventure"),
    DateIdea("Road Trip", "Pick a direction and drive somewhere new", "adventure"),
    DateIdea("Camping", "Set up a tent and enjoy nature together", "adventure"),
    DateIdea("Kayaking", "Rent kayaks and paddle on a lake or river", "adventure"),
    DateIdea("Zip Lining", "Get your adrenaline pumping together", "adventure"),
    DateIdea("Hot Air Balloon", "Soar above the landscape for a unique view", "adventure"),
    DateIdea("Bike Ride", "Explore a scenic bike path together", "adventure"),
    DateIdea("Beach Day", "Sun, sand, and waves for a relaxing adventure", "adventure"),
    DateIdea("Rock Climbing", "Try indoor climbing and support each other", "adventure"),
    DateIdea("Sunrise Hike", "Wake up early and catch the sunrise together", "adventure"),
    DateIdea("Coffee Date", "Meet at a cozy cafe for conversation", "quick"),
    DateIdea("Ice Cream Walk", "Get ice cream and take a walk together", "quick"),
    DateIdea("Sunset Watch", "Find a nice spot and watch the sunset", "quick"),
    DateIdea("Lunch Date", "Break from work for lunch together", "quick"),
    DateIdea("Morning Walk", "Start the day with a walk and chat", "quick"),
    DateIdea("Dessert Date", "Split a fancy dessert at a bakery", "quick"),
    DateIdea("Window Shopping", "Browse stores together without pressure to buy", "quick"),
    DateIdea("Park Hangout", "Bring a blanket and relax in the park", "quick"),
    DateIdea("Drive-Thru Adventure", "Get food and park somewhere scenic to eat", "quick"),
    DateIdea("Photo Walk", "Take pictures of each other around the neighborhood", "quick"),
)


def random_date_idea(rng: random.Random, category: str | None = None) -> DateIdea:
    """Pick an idea, optionally limited to one category.

    Raises ValueError for a category outside CATEGORY_LABELS.
    """
    if category is None:
        return rng.choice(DATE_IDEAS)
    if category not in CATEGORY_LABELS:
        raise ValueError(f"Unknown date idea category: {category!r}")
    return rng.choice([idea for idea in DATE_IDEAS if idea.category == category])
