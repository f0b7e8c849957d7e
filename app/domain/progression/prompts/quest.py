NEXT_QUEST_HUMAN = """The hunter has completed their previous quest and is now {rank}-rank with {xp} XP.

Previously completed quests: {completed_quests}

Career goal: {goal}

Current skills (Level 1-10):
{skills}

Generate the next Main Quest that:
1. Addresses their weakest skill or aligns with the career goal
2. Is appropriately challenging for a {rank}-rank hunter
3. Requires GitHub repository submission
4. Builds on their previous progress

Difficulty guidelines by rank:
- E Rank: Basic projects, single feature focus (50 XP)
- D Rank: Multi-feature projects, basic architecture (75 XP)
- C Rank: Complex projects, good practices required (100 XP)
- B Rank: Production-ready projects, advanced patterns (150 XP)

Respond with JSON:
{{
  "quest": {{
    "id": "unique-quest-id",
    "title": "Quest title",
    "description": "Detailed description",
    "requirements": ["req1", "req2"],
    "xp_reward": {xp_reward},
    "skill_focus": "skill name",
    "difficulty": "easy|medium|hard"
  }}
}}"""
