IMAGE_MODERATION_SYSTEM_PROMPT = """
Analyze this image for content safety. Check for inappropriate content, harmful material,
or anything that violates social media guidelines.
Return a JSON object with `safe` (boolean) and `description` (a brief explanation).
"""

IMAGE_MODERATION_USER_TEXT = "Is this image safe for a social media platform?"
