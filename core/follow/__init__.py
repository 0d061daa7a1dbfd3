from core.follow.service import FollowService

__all__ = ['FollowService']
