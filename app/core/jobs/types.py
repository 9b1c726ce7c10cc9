from enum import Enum, unique

@unique
class JobType(str, Enum):
    SEGMENTATION = "segmentation"
    TRANSCRIPTION = "transcription"

@unique
class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
