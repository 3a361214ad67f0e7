from app.models.user import User
from app.models.workout import Workout, WorkoutExercise
from app.models.fitness_class import FitnessClass
from app.models.booking import Booking
from app.models.membership import Membership
from app.models.payment import Payment
from app.models.achievement import Achievement, UserAchievement
from app.models.leaderboard import LeaderboardEntry
from app.models.challenge import Challenge, ChallengeParticipant
from app.models.notification import Notification
from app.models.social import SocialPost, PostLike, PostComment, Follow
from app.models.exercise_library import ExerciseLibrary

__all__ = [
    "User",
    "Workout", "WorkoutExercise",
    "FitnessClass", "Booking",
    "Membership", "Payment",
    "Achievement", "UserAchievement",
    "LeaderboardEntry",
    "Challenge", "ChallengeParticipant",
    "Notification",
    "SocialPost", "PostLike", "PostComment", "Follow",
    "ExerciseLibrary",
]
