# Prompt templates for the AI helpers.
# Every template is filled with str.format, so literal braces are doubled.
# Responses are free text; callers trim, validate and fall back.

CATEGORY_PROMPT = """Classify the following todo into exactly one of these categories:
- work
- personal
- shopping
- health
- learning
- other

Todo: "{text}"

Reply with the category name only, no explanation."""


PRIORITY_PROMPT = """Decide the priority of the following todo (low, medium, high):
- high: urgent, important, or has a close deadline
- medium: important but not urgent
- low: not very important, can be done later

Todo: "{text}"

Reply with only: low, medium, or high"""


SCHEDULE_PROMPT = """You are an AI productivity assistant. Break down the following task into a realistic schedule over {days} day(s):

Task: "{description}"

Guidelines:
- Split the work logically across {days} day(s)
- Each day should have 1-3 manageable subtasks
- Consider natural workflow and dependencies
- Include preparation, execution, and review phases where appropriate
- Suggest optimal times for different types of work (morning for creative work, afternoon for meetings, etc.)
- Each subtask should be achievable in 1-4 hours
- Be specific and actionable

Return a JSON array with this exact format:
[
  {{
    "title": "Specific task description",
    "day": 1,
    "time": "09:00"
  }}
]
"day" is an integer from 1 to {days}. "time" is optional, a suggested 24h time.

Example for "Prepare presentation for client meeting" over 3 days:
[
  {{"title": "Research client background and requirements", "day": 1, "time": "09:00"}},
  {{"title": "Create presentation outline and structure", "day": 1, "time": "14:00"}},
  {{"title": "Design slides and add content", "day": 2, "time": "09:00"}},
  {{"title": "Review and refine presentation", "day": 2, "time": "15:00"}},
  {{"title": "Practice presentation and prepare for Q&A", "day": 3, "time": "10:00"}}
]

Return ONLY the JSON array, no additional text."""


BREAKDOWN_PROMPT = """Break down this task into 3-5 smaller, actionable sub-tasks:
"{text}"

Guidelines:
- Each sub-task should be specific and actionable
- Sub-tasks should be achievable in 15-30 minutes
- Use clear, simple language
- Focus on practical steps
- Don't include the original task

Examples:
Input: "Plan a birthday party"
Output:
- Create guest list and send invitations
- Choose and book venue or prepare home space
- Plan menu and order/buy food
- Buy decorations and party supplies
- Prepare entertainment or activities

Return each sub-task on a new line, no numbering or bullets."""


SUGGESTIONS_PROMPT = """Based on existing todos: "{todos}"

Generate 4-6 smart task suggestions that:
- Break down daily activities into smaller, actionable tasks
- Complement existing tasks without duplication
- Are practical and achievable within a day
- Cover different life areas (work, health, personal, learning)
- Use specific, actionable language

Examples of good suggestions:
- "Review emails and respond to urgent ones"
- "Take a 10-minute walk outside"
- "Prepare tomorrow's outfit"
- "Drink 2 glasses of water"
- "Review today's accomplishments"

Return each suggestion on a new line, no numbering."""
