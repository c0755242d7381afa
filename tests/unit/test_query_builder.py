"""Unit tests for QueryBuilder compilation (to_sql)."""

from __future__ import annotations

from datetime import datetime, timezone

from query_kit.core.config import QueryKitConfig
from query_kit.query.builder import QueryBuilder, table
from query_kit.query.plan import raw


def qb(name: str = "users") -> QueryBuilder:
    return QueryBuilder(name, QueryKitConfig())


class TestProjection:
    def test_default_select_star(self) -> None:
        assert qb().to_sql() == ("SELECT * FROM users", [])

    def test_select_columns_and_list(self) -> None:
        assert qb().select("id", "name").to_sql()[0] == "SELECT id, name FROM users"
        assert qb().select(["id", "email"]).to_sql()[0] == "SELECT id, email FROM users"

    def test_select_raw_instance(self) -> None:
        sql, _ = qb().select("id", raw("COUNT(*) AS n")).to_sql()
        assert sql == "SELECT id, COUNT(*) AS n FROM users"

    def test_expressions_replace_default_star(self) -> None:
        sql, _ = qb().select_count().select_sum("age", "total").to_sql()
        assert sql == "SELECT COUNT(*) AS count, SUM(age) AS total FROM users"

    def test_expressions_append_to_explicit_columns(self) -> None:
        sql, _ = qb().select("status").select_raw("COUNT(*) AS n").group_by("status").to_sql()
        assert sql == "SELECT status, COUNT(*) AS n FROM users GROUP BY status"

    def test_case_sum(self) -> None:
        sql, _ = qb("orders").select_case_sum("status = 'paid'", "paid").to_sql()
        assert sql == "SELECT SUM(CASE WHEN status = 'paid' THEN 1 ELSE 0 END) AS paid FROM orders"

    def test_first_aggregate_governs_projection(self) -> None:
        sql, _ = qb().count().max("age").to_sql()
        assert sql == "SELECT count(*) as count FROM users"

    def test_aggregate_default_alias(self) -> None:
        assert qb().sum("age").to_sql()[0] == "SELECT sum(age) as sum_age FROM users"
        assert qb().avg("age", "mean").to_sql()[0] == "SELECT avg(age) as mean FROM users"

    def test_distinct_and_alias(self) -> None:
        sql, _ = qb().distinct().select("u.city").alias("u").to_sql()
        assert sql == "SELECT DISTINCT u.city FROM users u"


class TestWhere:
    def test_shorthand_equality(self) -> None:
        assert qb().where("id", 5).to_sql() == ("SELECT * FROM users WHERE id = ?", [5])

    def test_or_where(self) -> None:
        sql, bindings = qb().where("a", "=", 1).or_where("b", ">", 2).to_sql()
        assert sql == "SELECT * FROM users WHERE a = ? OR b > ?"
        assert bindings == [1, 2]

    def test_where_in_scenario(self) -> None:
        sql, bindings = qb("t").where_in("id", [1, 2, 3]).to_sql()
        assert sql == "SELECT * FROM t WHERE id IN (?,?,?)"
        assert bindings == [1, 2, 3]

    def test_empty_membership(self) -> None:
        assert qb().where_in("id", []).to_sql()[0] == "SELECT * FROM users WHERE 1=0"
        assert qb().where_not_in("id", []).to_sql()[0] == "SELECT * FROM users WHERE 1=1"

    def test_or_variants(self) -> None:
        sql, bindings = (
            qb()
            .where_null("a")
            .or_where_not_null("b")
            .or_where_in("c", [1])
            .or_where_not_in("d", [2])
            .or_where_null("e")
            .to_sql()
        )
        assert sql == (
            "SELECT * FROM users WHERE a IS NULL OR b IS NOT NULL "
            "OR c IN (?) OR d NOT IN (?) OR e IS NULL"
        )
        assert bindings == [1, 2]

    def test_between_and_column(self) -> None:
        sql, bindings = (
            qb().where_between("age", [18, 30]).where_not_between("score", (0, 10))
            .where_column("created_at", "<", "updated_at").to_sql()
        )
        assert sql == (
            "SELECT * FROM users WHERE age BETWEEN ? AND ? AND score NOT BETWEEN ? AND ? "
            "AND created_at < updated_at"
        )
        assert bindings == [18, 30, 0, 10]

    def test_where_if_and_where_all_skip_empty(self) -> None:
        sql, bindings = (
            qb().where_if(None, "a", "=", 1).where_if("", "b", "=", 2).where_if(0, "c", "=", 0)
            .where_all({"d": "x", "e": None, "f": ""}).to_sql()
        )
        assert sql == "SELECT * FROM users WHERE c = ? AND d = ?"
        assert bindings == [0, "x"]

    def test_raw_clauses(self) -> None:
        sql, bindings = qb().where_raw("age > ?", [1]).or_where_raw("vip = ?", [True]).to_sql()
        assert sql == "SELECT * FROM users WHERE age > ? OR vip = ?"
        assert bindings == [1, True]

    def test_exists(self) -> None:
        sub = qb("orders").where_column("orders.user_id", "=", "users.id").where("total", ">", 9)
        sql, bindings = qb().where("active", 1).where_exists(sub).to_sql()
        assert sql == (
            "SELECT * FROM users WHERE active = ? AND EXISTS "
            "(SELECT * FROM orders WHERE orders.user_id = users.id AND total > ?)"
        )
        assert bindings == [1, 9]

    def test_like_helpers(self) -> None:
        sql, bindings = (
            qb().where_contains("name", "an").where_starts_with("email", "a")
            .where_ends_with("email", ".com").or_where_like("nick", "x_").to_sql()
        )
        assert sql == (
            "SELECT * FROM users WHERE name LIKE ? AND email LIKE ? AND email LIKE ? "
            "OR nick LIKE ?"
        )
        assert bindings == ["%an%", "a%", "%.com", "x_"]

    def test_case_insensitive_helpers(self) -> None:
        sql, bindings = qb().where_contains_ci("name", "AN").where_starts_with_ci("c", "b").to_sql()
        assert sql == (
            "SELECT * FROM users WHERE name LIKE ? COLLATE NOCASE AND c LIKE ? COLLATE NOCASE"
        )
        assert bindings == ["%AN%", "b%"]

    def test_where_search(self) -> None:
        sql, bindings = qb().where_search("jo", ["name", "email"]).to_sql()
        assert sql == "SELECT * FROM users WHERE (name LIKE ? OR email LIKE ?)"
        assert bindings == ["%jo%", "%jo%"]
        assert qb().where_search("", ["name"]).to_sql() == ("SELECT * FROM users", [])

    def test_range(self) -> None:
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        sql, bindings = qb().range("created_at", start=start).to_sql()
        assert sql == "SELECT * FROM users WHERE created_at >= ?"
        assert bindings == [start.isoformat()]

    def test_period(self) -> None:
        sql, bindings = qb().period("created_at", "7d").to_sql()
        assert sql == "SELECT * FROM users WHERE created_at >= ?"
        assert len(bindings) == 1
        assert qb().period("created_at", None).to_sql() == ("SELECT * FROM users", [])


class TestStructure:
    def test_joins(self) -> None:
        sql, _ = (
            qb().alias("u").inner_join("orders o", "o.user_id = u.id")
            .left_join_on("profiles p", "p.user_id", "u.id").right_join("x", "x.id = u.x_id")
            .to_sql()
        )
        assert sql == (
            "SELECT * FROM users u INNER JOIN orders o ON o.user_id = u.id "
            "LEFT JOIN profiles p ON p.user_id = u.id RIGHT JOIN x ON x.id = u.x_id"
        )

    def test_clause_order_and_binding_order(self) -> None:
        sql, bindings = (
            qb("orders")
            .select("status")
            .select_count()
            .where("total", ">", 10)
            .group_by("status")
            .having("COUNT(*)", ">", 2)
            .having_raw("SUM(total) < ?", [500])
            .order_by("status", "desc")
            .limit(5)
            .offset(10)
            .to_sql()
        )
        assert sql == (
            "SELECT status, COUNT(*) AS count FROM orders WHERE total > ? GROUP BY status "
            "HAVING COUNT(*) > ? AND SUM(total) < ? ORDER BY status DESC LIMIT ? OFFSET ?"
        )
        assert bindings == [10, 2, 500, 5, 10]
        assert sql.count("?") == len(bindings)

    def test_having_if(self) -> None:
        sql, _ = qb().group_by_one("a").having_if(None, "n", ">", 1).to_sql()
        assert sql == "SELECT * FROM users GROUP BY a"

    def test_order_by_many(self) -> None:
        orders = [{"column": "a"}, {"column": "b", "direction": "DESC"}]
        sql, _ = qb().order_by_many(orders).to_sql()
        assert sql == "SELECT * FROM users ORDER BY a ASC, b DESC"

    def test_paginate(self) -> None:
        sql, bindings = qb().paginate(3, 20).to_sql()
        assert sql == "SELECT * FROM users LIMIT ? OFFSET ?"
        assert bindings == [20, 40]

    def test_offset_without_limit(self) -> None:
        assert qb().offset(5).to_sql() == ("SELECT * FROM users OFFSET ?", [5])

    def test_union(self) -> None:
        sql, bindings = (
            qb().select("id").where("a", 1)
            .union(qb("admins").select("id").where("b", 2))
            .union_all(qb("guests").select("id"))
            .to_sql()
        )
        assert sql == (
            "(SELECT id FROM users WHERE a = ?) UNION (SELECT id FROM admins WHERE b = ?) "
            "UNION ALL (SELECT id FROM guests)"
        )
        assert bindings == [1, 2]


class TestComposition:
    def test_to_sql_is_repeatable(self) -> None:
        query = qb().where("id", 1).limit(1)
        assert query.to_sql() == query.to_sql()

    def test_when_and_unless(self) -> None:
        query = (
            qb()
            .when("bob", lambda q, name: q.where("name", name))
            .when(None, lambda q, _: q.where("never", 1))
            .unless(False, lambda q, _: q.where_null("deleted_at"))
        )
        assert query.to_sql() == (
            "SELECT * FROM users WHERE name = ? AND deleted_at IS NULL",
            ["bob"],
        )

    def test_clone_is_independent(self) -> None:
        base = qb().where("active", 1)
        copy = base.clone().where("age", ">", 3).order_by("id")
        assert base.to_sql() == ("SELECT * FROM users WHERE active = ?", [1])
        assert copy.to_sql() == (
            "SELECT * FROM users WHERE active = ? AND age > ? ORDER BY id ASC",
            [1, 3],
        )

    def test_table_factory_uses_given_config(self) -> None:
        config = QueryKitConfig()
        assert table("users", config).config is config

    def test_bank_hints(self) -> None:
        assert qb().bank("replica").banks == ["replica"]
        assert qb().bank(["a", "b"]).banks == ["a", "b"]
