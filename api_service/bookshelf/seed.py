"""
Seed script — populates the database with demo readers, books, and reviews.
Run: python -m bookshelf.seed
"""

from __future__ import annotations

import asyncio
import random

from sqlalchemy import select

from bookshelf.auth.password import hash_password
from bookshelf.database import Base, async_session, engine
from bookshelf.models.book import Book
from bookshelf.models.profile import Profile
from bookshelf.models.review import Review
from bookshelf.models.user import User

SAMPLE_BOOKS = [
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "genre": "Classic",
        "description": "A story of the mysteriously wealthy Jay Gatsby and his love for Daisy Buchanan.",
        "published_year": 1925,
    },
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "genre": "Classic",
        "description": "A young girl watches her father defend a Black man accused of a crime in Depression-era Alabama.",
        "published_year": 1960,
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "genre": "Dystopian",
        "description": "Winston Smith rebels against a totalitarian regime that watches everything.",
        "published_year": 1949,
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": "Romance",
        "description": "Elizabeth Bennet and Mr. Darcy misjudge each other across the drawing rooms of Regency England.",
        "published_year": 1813,
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "genre": "Fantasy",
        "description": "Bilbo Baggins is swept into a quest to reclaim a dwarf kingdom from a dragon.",
        "published_year": 1937,
    },
    {
        "title": "Dune",
        "author": "Frank Herbert",
        "genre": "Science Fiction",
        "description": "Paul Atreides is drawn into the struggle for the desert planet Arrakis.",
        "published_year": 1965,
    },
    {
        "title": "The Left Hand of Darkness",
        "author": "Ursula K. Le Guin",
        "genre": "Science Fiction",
        "description": "An envoy to the planet Gethen confronts a society without fixed gender.",
        "published_year": 1969,
    },
    {
        "title": "Beloved",
        "author": "Toni Morrison",
        "genre": "Literary Fiction",
        "description": "A formerly enslaved woman is haunted by the ghost of her daughter.",
        "published_year": 1987,
    },
    {
        "title": "The Name of the Wind",
        "author": "Patrick Rothfuss",
        "genre": "Fantasy",
        "description": "Kvothe recounts his life from traveling performer to legendary arcanist.",
        "published_year": 2007,
    },
    {
        "title": "Gone Girl",
        "author": "Gillian Flynn",
        "genre": "Thriller",
        "description": "On their fifth anniversary, Nick Dunne's wife Amy disappears.",
        "published_year": 2012,
    },
]

SAMPLE_USERS = [
    {"email": "alice@example.com", "name": "Alice", "password": "Alice@12345"},
    {"email": "bob@example.com", "name": "Bob", "password": "Bob@1234567"},
    {"email": "carol@example.com", "name": "Carol", "password": "Carol@123456"},
    {"email": "dave@example.com", "name": "Dave", "password": "Dave@1234567"},
]

REVIEW_SNIPPETS = {
    1: "Could not finish it.",
    2: "Some good moments, mostly a slog.",
    3: "Solid read, a little uneven.",
    4: "Really enjoyed this one.",
    5: "An all-time favourite.",
}


async def seed():
    """Seed the database with sample data."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        # Check if already seeded
        result = await session.execute(select(User).limit(1))
        if result.scalar_one_or_none():
            print("Database already seeded. Skipping.")
            return

        users = []
        for u in SAMPLE_USERS:
            user = User(email=u["email"], hashed_password=hash_password(u["password"]))
            session.add(user)
            users.append((user, u["name"]))
        await session.flush()
        for user, name in users:
            session.add(Profile(id=user.id, name=name))
        print(f"Created {len(users)} users")

        # Books are spread across the demo users so each has something to own
        books = []
        for i, b in enumerate(SAMPLE_BOOKS):
            owner, _ = users[i % len(users)]
            book = Book(**b, added_by=owner.id)
            session.add(book)
            books.append(book)
        await session.flush()
        print(f"Created {len(books)} books")

        # At most one review per (book, user)
        count = 0
        for user, _ in users:
            for book in random.sample(books, random.randint(3, len(books))):
                rating = random.randint(1, 5)
                session.add(
                    Review(
                        book_id=book.id,
                        user_id=user.id,
                        rating=rating,
                        review_text=REVIEW_SNIPPETS[rating],
                    )
                )
                count += 1
        await session.flush()
        print(f"Created {count} reviews")

        await session.commit()
        print("Seeding complete!")


if __name__ == "__main__":
    asyncio.run(seed())
