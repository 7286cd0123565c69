from typing import List, Tuple

from paperpilot.prompts.roles import ReviewerRole, SectionView
from paperpilot.schemas import PaperSections


class SectionRouter:
    """
    Maps a reviewer role to the paper sections it is allowed to read.

    Philosophy:
    - Each reviewer sees a fixed subset of sections, declared in its role
    - Every section is cut to the role's character budget before it reaches a prompt
    - Optional sections that the author left out are skipped, never padded
    """

    def route(self, role: ReviewerRole, sections: PaperSections) -> List[Tuple[str, str]]:
        """
        Select and truncate the sections visible to `role`.

        Returns:
            List of (label, text) pairs in the order the role declares them
        """
        routed = []
        for view in role.sections:
            text = getattr(sections, view.name, None)
            if not text:
                if view.optional:
                    continue
                text = ""
            routed.append((view.label, self.truncate(text, view)))
        return routed

    @staticmethod
    def truncate(text: str, view: SectionView) -> str:
        """
        Hard cut at the character budget.

        The cut is not sentence aware, so the last sentence a reviewer sees may
        stop mid-word.
        """
        if view.max_chars is None:
            return text
        return text[:view.max_chars]
