"""Branch rankings and per-user progress statistics."""
from everest_speak.db import get_connection


def get_branch_rankings(db_path: str) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT b.id, b.name as branch_name, SUM(u.points) as total_points, COUNT(u.id) as user_count
        FROM branches b
        JOIN users u ON b.id = u.branch_id
        GROUP BY b.id, b.name
        ORDER BY total_points DESC, b.name ASC"""
    ).fetchall()
    conn.close()
    return [
        {
            "branch_id": r["id"],
            "branch_name": r["branch_name"],
            "total_points": r["total_points"],
            "user_count": r["user_count"],
        }
        for r in rows
    ]


def get_user_summary(db_path: str, user_id: int) -> dict:
    conn = get_connection(db_path)
    user = conn.execute("SELECT points FROM users WHERE id = ?", (user_id,)).fetchone()
    reward_days = conn.execute("SELECT COUNT(*) FROM daily_logs WHERE user_id = ?", (user_id,)).fetchone()[0]
    missions = conn.execute(
        """SELECT SUM(CASE WHEN result = 'success' THEN 1 ELSE 0 END) as completed,
            SUM(CASE WHEN result = 'fail' THEN 1 ELSE 0 END) as failed
        FROM mission_logs WHERE user_id = ?""",
        (user_id,),
    ).fetchone()
    test = conn.execute(
        "SELECT month, score, result, attempts FROM test_results WHERE user_id = ? ORDER BY month DESC LIMIT 1",
        (user_id,),
    ).fetchone()
    conn.close()
    return {
        "points": user["points"] if user else 0,
        "reward_days": reward_days,
        "missions_completed": missions["completed"] or 0,
        "missions_failed": missions["failed"] or 0,
        "latest_test": dict(test) if test else None,
    }
