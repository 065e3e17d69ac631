"""
Factory Boy factories for catalog entities.

Factories build unsaved dataclass entities (no id, not deleted, unlinked);
tests persist them through the services. ISBNs come from a sequence so every
generated record is unique among live rows.
"""

import factory

from catalog.models.entities import BibliographicRecord, Book


class BookFactory(factory.Factory):
    """Valid, unsaved ``Book``."""

    class Meta:
        model = Book

    title = factory.Faker("sentence", nb_words=4)
    author = factory.Faker("name")
    publisher = factory.Faker("company")
    publication_year = factory.Faker("random_int", min=1800, max=2020)


class BibliographicRecordFactory(factory.Factory):
    """Valid, unsaved and unlinked ``BibliographicRecord``."""

    class Meta:
        model = BibliographicRecord

    isbn = factory.Sequence(lambda n: f"978-{n:010d}")
    dewey_class = factory.Sequence(lambda n: f"{n % 1000:03d}.{n % 97:02d}")
    shelf_location = factory.Faker("bothify", text="??-##")
    language = factory.Iterator(["English", "French", "German", "Spanish"])
