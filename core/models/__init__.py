from core.models.requests import (
    CreateAcademicYearRequest,
    SubjectMarkRequest,
    CreateTermResultRequest,
    LearnerSearchRequest,
    UpdateApplicationStatusRequest,
    FollowLearnerRequest,
    UpdateProfileRequest,
    BursarySearchRequest,
)
from core.models.responses import (
    SubjectMarkResponse,
    TermResultResponse,
    AcademicYearResponse,
    LearnerSearchResultResponse,
    LearnerProfileDetailResponse,
    ProviderInfo,
    BursaryInfo,
    ApplicationResponse,
    LearnerInfo,
    ProviderApplicationResponse,
    ApplicationCheckResponse,
    ApplicationStatisticsResponse,
    FollowResponse,
    NotificationResponse,
    LearnerProfileResponse,
    BursarySummaryResponse,
    BursaryDetailResponse,
)

__all__ = [
    'CreateAcademicYearRequest',
    'SubjectMarkRequest',
    'CreateTermResultRequest',
    'LearnerSearchRequest',
    'UpdateApplicationStatusRequest',
    'FollowLearnerRequest',
    'SubjectMarkResponse',
    'TermResultResponse',
    'AcademicYearResponse',
    'LearnerSearchResultResponse',
    'LearnerProfileDetailResponse',
    'ProviderInfo',
    'BursaryInfo',
    'ApplicationResponse',
    'LearnerInfo',
    'ProviderApplicationResponse',
    'ApplicationCheckResponse',
    'ApplicationStatisticsResponse',
    'FollowResponse',
    'NotificationResponse',
    'UpdateProfileRequest',
    'BursarySearchRequest',
    'LearnerProfileResponse',
    'BursarySummaryResponse',
    'BursaryDetailResponse',
]
