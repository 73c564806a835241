"""Models module."""

from .user import User, UserCreate, HealthProfile, ProfileUpdate, Token, TokenData
from .tracking import (
    ActivityType, Intensity, SleepQuality, Meal, StoredRecord,
    WeightEntry, WeightEntryCreate, SleepEntry, SleepEntryCreate,
    CalorieEntry, CalorieEntryCreate, CalorieEntryUpdate,
    ActivityEntry, ActivityEntryCreate, ActivityEstimateRequest, ActivityEstimate,
    NutritionLog, NutritionLogCreate, MedicalCondition, MedicalConditionCreate,
)
from .chat import Sender, ChatContext, ChatContextCreate, ChatMessage, ChatMessageCreate, AssistantQuery, AssistantReply
from .summary import (
    DailySummary, TodayStats, Dashboard,
    NutritionAnalysis, NutritionAnalysisRequest, NutritionAnalysisResponse,
)
from .news import NewsArticle

__all__ = [
    'User', 'UserCreate', 'HealthProfile', 'ProfileUpdate', 'Token', 'TokenData',
    'ActivityType', 'Intensity', 'SleepQuality', 'Meal', 'StoredRecord',
    'WeightEntry', 'WeightEntryCreate', 'SleepEntry', 'SleepEntryCreate',
    'CalorieEntry', 'CalorieEntryCreate', 'CalorieEntryUpdate',
    'ActivityEntry', 'ActivityEntryCreate', 'ActivityEstimateRequest', 'ActivityEstimate',
    'NutritionLog', 'NutritionLogCreate', 'MedicalCondition', 'MedicalConditionCreate',
    'Sender', 'ChatContext', 'ChatContextCreate', 'ChatMessage', 'ChatMessageCreate',
    'AssistantQuery', 'AssistantReply',
    'DailySummary', 'TodayStats', 'Dashboard',
    'NutritionAnalysis', 'NutritionAnalysisRequest', 'NutritionAnalysisResponse',
    'NewsArticle',
]
