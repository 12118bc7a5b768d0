"""
Unit tests for image_repository.py and user_repository.py against SQLite
"""

import pytest
from sqlalchemy.exc import IntegrityError


class TestImageRepository:
    """Tests for image metadata queries"""

    def test_insert_returns_row(self, engine):
        from image_repository import insert_image

        record = insert_image(engine, sub='user-1', uuid_filename='uuid-1', image_name='First')

        assert record['id'] >= 1
        assert record['sub'] == 'user-1'
        assert record['uuid_filename'] == 'uuid-1'
        assert record['image_name'] == 'First'
        assert record['image_description'] is None
        assert record['created_at'] is not None

    def test_insert_stores_description(self, engine):
        from image_repository import insert_image

        record = insert_image(engine, 'user-1', 'uuid-2', 'Second', image_description='A caption')

        assert record['image_description'] == 'A caption'

    def test_uuid_filename_is_unique(self, engine):
        from image_repository import insert_image

        insert_image(engine, 'user-1', 'dup-uuid', 'One')
        with pytest.raises(IntegrityError):
            insert_image(engine, 'user-2', 'dup-uuid', 'Two')

    def test_ids_increase(self, engine):
        from image_repository import insert_image

        first = insert_image(engine, 'user-1', 'a', 'A')
        second = insert_image(engine, 'user-1', 'b', 'B')

        assert second['id'] > first['id']

    def test_list_images_for_user_filters_by_owner(self, engine):
        from image_repository import insert_image, list_images_for_user

        insert_image(engine, 'user-1', 'a', 'A')
        insert_image(engine, 'user-2', 'b', 'B')
        insert_image(engine, 'user-1', 'c', 'C')

        images = list_images_for_user(engine, 'user-1')

        assert [i['uuid_filename'] for i in images] == ['c', 'a']

    def test_list_all_images_respects_limit(self, engine):
        from image_repository import insert_image, list_all_images

        for n in range(4):
            insert_image(engine, f'user-{n}', f'uuid-{n}', f'Image {n}')

        images = list_all_images(engine, limit=3)

        assert len(images) == 3
        assert images[0]['uuid_filename'] == 'uuid-3'


class TestUserRepository:
    """Tests for registered_user queries"""

    def test_get_user_by_sub(self, engine, registered_user):
        from user_repository import get_user_by_sub

        assert get_user_by_sub(engine, 'test-user-123') == registered_user

    def test_get_missing_user_returns_none(self, engine):
        from user_repository import get_user_by_sub

        assert get_user_by_sub(engine, 'nobody') is None

    def test_update_nickname(self, engine, registered_user):
        from user_repository import get_user_by_sub, update_user_nickname

        updated = update_user_nickname(engine, 'test-user-123', 'Shutterbug')

        assert updated['nickname'] == 'Shutterbug'
        assert get_user_by_sub(engine, 'test-user-123')['nickname'] == 'Shutterbug'

    def test_update_nickname_to_none(self, engine, registered_user):
        from user_repository import update_user_nickname

        update_user_nickname(engine, 'test-user-123', 'Temp')
        updated = update_user_nickname(engine, 'test-user-123', None)

        assert updated['nickname'] is None

    def test_update_missing_user_raises(self, engine):
        from user_repository import UserNotFoundError, update_user_nickname

        with pytest.raises(UserNotFoundError, match='User not found'):
            update_user_nickname(engine, 'nobody', 'Ghost')

    def test_create_user_is_idempotent(self, engine):
        from user_repository import create_user, get_user_by_sub

        assert create_user(engine, 'new-user', 'new@example.com') is True
        assert create_user(engine, 'new-user', 'other@example.com') is False
        assert get_user_by_sub(engine, 'new-user')['email'] == 'new@example.com'
