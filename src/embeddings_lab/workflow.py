import asyncio
from typing import Any

from workflows import Context, Workflow, step
from workflows.events import Event, StartEvent, StopEvent

from .composer import AnswerComposer
from .errors import EmbeddingsLabError
from .search import TextRetriever
from .storage import SearchResult


class QuestionEvent(StartEvent):
    question: str


class ContextEvent(Event):
    question: str
    results: list[SearchResult]


class AnswerEndEvent(StopEvent):
    answer: str | None = None
    sources: list[str] = []
    error: str | None = None


class RecipeQAWorkflow(Workflow):
    """Retrieve similar recipes for a question, then ask the model about them."""

    def __init__(
        self,
        *,
        retriever: TextRetriever,
        composer: AnswerComposer,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.retriever = retriever
        self.composer = composer

    @step
    async def retrieve(self, ev: QuestionEvent, ctx: Context) -> ContextEvent | AnswerEndEvent:
        try:
            results = await asyncio.to_thread(self.retriever.search, ev.question)
        except EmbeddingsLabError as e:
            return AnswerEndEvent(error=str(e))
        res = ContextEvent(question=ev.question, results=results)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def compose(self, ev: ContextEvent) -> AnswerEndEvent:
        try:
            answer = await self.composer.answer(ev.question, ev.results)
        except EmbeddingsLabError as e:
            return AnswerEndEvent(error=str(e))
        return AnswerEndEvent(
            answer=answer, sources=[result.label for result in ev.results]
        )
