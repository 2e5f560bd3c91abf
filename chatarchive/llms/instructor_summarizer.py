from instructor import Instructor

from chatarchive.llms.schemas import EntrySummary

SYSTEM_MESSAGE = (
    "You are a helpful assistant that analyzes conversations and generates concise titles "
    "and relevant tags."
)

PROMPT_TEMPLATE = """Analyze the following conversation and provide:
1. A concise, informative title (5-10 words) that captures the main topic
2. 3-5 relevant tags (single words or short phrases, lowercase, hyphenated if needed)

Conversation:
{conversation}"""


class InstructorSummarizer:
    def __init__(
        self,
        instructor: Instructor,
        model: str = "claude-3-5-sonnet-20241022",
        max_chars: int = 12000,
    ) -> None:
        self.instructor = instructor
        self.model = model
        self.max_chars = max_chars

    def summarize(self, text: str) -> EntrySummary:
        prompt = PROMPT_TEMPLATE.format(conversation=text[: self.max_chars])
        return self.instructor.chat.completions.create(
            model=self.model,
            max_tokens=512,
            messages=[
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            response_model=EntrySummary,
        )
