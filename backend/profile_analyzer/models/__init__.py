from profile_analyzer.db.base import Base
from profile_analyzer.models.profile import Profile
from profile_analyzer.models.repository import RepositorySnapshot
from profile_analyzer.models.analysis_result import AnalysisResult

__all__ = ["Base", "Profile", "RepositorySnapshot", "AnalysisResult"]
