"""
Image upload controller

Issues a short-lived presigned PUT URL for a new image and records its
metadata. The object key is a random UUID so display names never leak into
storage paths.
"""

import logging
import uuid

import image_repository
from db_client import IMAGE_NAME_MAX_LENGTH

logger = logging.getLogger(__name__)


class ImageValidationError(ValueError):
    """Request body failed validation; the message is shown to the caller."""


def validate_image_name(body):
    """Return the trimmed imageName from a request body.

    Rules are checked in order and the first failure is raised.

    Raises:
        ImageValidationError
    """
    image_name = body.get('imageName') if isinstance(body, dict) else None
    if image_name is None:
        raise ImageValidationError('Image name is required')
    if not isinstance(image_name, str):
        raise ImageValidationError('Image name must be a string')

    image_name = image_name.strip()
    if len(image_name) < 1:
        raise ImageValidationError('Image name is required')
    if len(image_name) > IMAGE_NAME_MAX_LENGTH:
        raise ImageValidationError(
            f'Image name must be {IMAGE_NAME_MAX_LENGTH} characters or less'
        )
    return image_name


def generate_upload_url(s3, settings, key):
    """Sign a PUT URL for key. Signing is local; no request reaches S3."""
    return s3.generate_presigned_url(
        'put_object',
        Params={
            'Bucket': settings.bucket_name,
            'Key': key,
            'ContentType': settings.upload_content_type,
        },
        ExpiresIn=settings.upload_expires_in,
    )


def get_presigned_url(identity, body, clients):
    """Handle POST /images/presigned-url.

    Args:
        identity: AuthUser or None
        body: parsed JSON request body
        clients: ServiceClients

    Returns:
        tuple: (status_code, response_body)
    """
    if identity is None or not identity.sub:
        return 401, {'error': 'Unauthorized'}

    try:
        image_name = validate_image_name(body)
        uuid_filename = str(uuid.uuid4())

        presigned_url = generate_upload_url(clients.s3, clients.settings, uuid_filename)

        try:
            image_record = image_repository.insert_image(
                clients.engine,
                sub=identity.sub,
                uuid_filename=uuid_filename,
                image_name=image_name,
            )
        except Exception:
            # The signed URL stays usable until it expires; nothing reconciles it
            logger.warning("Metadata insert failed, presigned key %s is orphaned", uuid_filename)
            raise

        if not image_record:
            logger.error("getPresignedUrl: failed to insert image record for %s", uuid_filename)
            return 500, {'error': 'Failed to create image record'}

        logger.info("Issued upload URL for image %s (%s)", image_record['id'], uuid_filename)
        return 200, {
            'success': True,
            'presignedUrl': presigned_url,
            'imageId': image_record['id'],
            'uuidFilename': uuid_filename,
            'message': 'Presigned URL generated successfully',
        }

    except ImageValidationError as e:
        return 400, {'error': str(e)}
    except Exception:
        logger.exception("getPresignedUrl failed")
        return 500, {'error': 'Failed to generate presigned URL'}
