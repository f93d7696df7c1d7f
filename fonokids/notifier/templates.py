from __future__ import annotations
from datetime import datetime, timezone
from html import escape
from typing import Optional

from .contracts import Message

RESET_SUBJECT = "Recovery code - FonoKids"

def render_reset_code_email(*, to: str, code: str, ttl_minutes: int, name: Optional[str] = None) -> Message:
    greeting = f"Hi {name}!" if name else "Hi!"
    year = datetime.now(timezone.utc).year

    text_body = (
        f"{greeting}\n\n"
        f"We received a request to reset your FonoKids password. Your code is: {code}\n"
        f"It expires in {ttl_minutes} minutes.\n\n"
        f"If you did not request this change, ignore this message."
    )

    html_body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); padding: 20px; border-radius: 15px;">
  <div style="background: white; padding: 30px; border-radius: 10px; text-align: center;">
    <h1 style="color: #4A90E2; margin-bottom: 20px;">FonoKids - Password recovery</h1>
    <p style="font-size: 18px; color: #333;">{escape(greeting)}</p>
    <p style="color: #666; margin-bottom: 30px;">We received a request to reset your password. Use this code:</p>
    <div style="background: #f0f8ff; border: 2px solid #4A90E2; border-radius: 10px; padding: 20px; margin: 20px 0;">
      <h2 style="color: #4A90E2; font-size: 32px; margin: 0; letter-spacing: 5px;">{escape(code)}</h2>
    </div>
    <p style="color: #e74c3c; font-weight: bold;">This code expires in {ttl_minutes} minutes</p>
    <p style="color: #666; font-size: 14px; margin-top: 30px;">If you did not request this change, ignore this message.</p>
    <p style="color: #999; font-size: 12px; margin-top: 30px;">&copy; {year} FonoKids</p>
  </div>
</div>
"""
    return Message(to=to, subject=RESET_SUBJECT, html_body=html_body, text_body=text_body)
