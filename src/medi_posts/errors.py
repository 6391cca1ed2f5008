class MediPostsError(Exception):
    """
    Base exception for MediPosts
    """

    pass


class NetworkError(MediPostsError):
    """
    Raised when a call to the remote API fails or returns an unusable response
    """

    pass


class LoadError(MediPostsError):
    """
    Raised when the posts of a user could not be loaded
    """

    pass


class ValidationError(MediPostsError):
    """
    Raised when a required field is empty
    """

    pass


class UserNotFoundError(MediPostsError):
    """
    Raised when no user matches the username given at login
    """

    pass


class PostBusyError(MediPostsError):
    """
    Raised when a post already has an operation in flight
    """

    def __init__(self, post_id: int):
        super().__init__(f"Post {post_id} is busy")
        self.post_id = post_id
