from stacks.api_stack import ApiStack
from stacks.post_confirmation_stack import CognitoPostConfirmationStack
from stacks.storage_stack import StorageStack

__all__ = ['ApiStack', 'CognitoPostConfirmationStack', 'StorageStack']
