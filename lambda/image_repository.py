"""Image metadata queries."""

from sqlalchemy import insert, select

from db_client import images, row_to_dict

IMAGE_COLUMNS = (
    images.c.id,
    images.c.sub,
    images.c.uuid_filename,
    images.c.image_name,
    images.c.image_description,
    images.c.created_at,
)


def insert_image(engine, sub, uuid_filename, image_name, image_description=None):
    """Insert an image row and return it, or None if nothing came back."""
    stmt = (
        insert(images)
        .values(
            sub=sub,
            uuid_filename=uuid_filename,
            image_name=image_name,
            image_description=image_description,
        )
        .returning(*IMAGE_COLUMNS)
    )
    with engine.begin() as conn:
        row = conn.execute(stmt).first()
    return row_to_dict(row)


def list_images_for_user(engine, sub, limit=100):
    """Images owned by a subject, newest first."""
    stmt = (
        select(*IMAGE_COLUMNS)
        .where(images.c.sub == sub)
        .order_by(images.c.created_at.desc(), images.c.id.desc())
        .limit(limit)
    )
    with engine.connect() as conn:
        return [row_to_dict(row) for row in conn.execute(stmt)]


def list_all_images(engine, limit=100):
    """Every image record, newest first."""
    stmt = (
        select(*IMAGE_COLUMNS)
        .order_by(images.c.created_at.desc(), images.c.id.desc())
        .limit(limit)
    )
    with engine.connect() as conn:
        return [row_to_dict(row) for row in conn.execute(stmt)]
