"""Default service categories seeded into a fresh database."""

DEFAULT_CATEGORIES = [
    ('Technology & IT', 'Programming, support, web development, etc.'),
    ('Creative & Design', 'Graphic design, writing, photography, music, etc.'),
    ('Home Services', 'Cleaning, repairs, gardening, organization, etc.'),
    ('Tutoring & Education', 'Academic subjects, languages, test prep, etc.'),
    ('Health & Wellness', 'Fitness training, yoga, coaching, nutrition, etc.'),
    ('Crafts & Hobbies', 'Knitting, pottery, painting, model building, etc.'),
    ('Events & Planning', 'Party planning, coordination, catering help, etc.'),
    ('Consulting & Business', 'Marketing advice, financial planning, administrative support, etc.'),
    ('Other', 'Miscellaneous services not covered elsewhere.'),
]


def seed_categories(session):
    """Insert any missing default categories. Returns the number created.

    Existing categories (matched by name) are left untouched, so this is
    safe to run repeatedly.
    """
    from skillpact.models import ServiceCategory

    existing = {name for (name,) in session.query(ServiceCategory.name).all()}
    created = 0
    for name, description in DEFAULT_CATEGORIES:
        if name in existing:
            continue
        session.add(ServiceCategory(name=name, description=description))
        created += 1
    session.commit()
    return created
