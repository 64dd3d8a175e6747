from memtable import Table, left_join, outer_join, stack, unstack

shops = Table(
    {
        "shop": ["A", "B", "C", None],
        "city": ["Rome", "Milan", "Rome", "Turin"],
    }
)
sales = Table(
    {
        "shop": ["A", "A", "C", "D", None],
        "year": [2023, 2024, 2024, 2024, 2024],
        "amount": [10.5, 20.0, 7.25, 3.0, 1.0],
    }
)

print(left_join(sales, shops, on="shop", match_missing="notequal"))
print("---")
print(outer_join(shops, sales, on="shop", match_missing="equal", indicator="source"))
print("---")
wide = unstack(sales.drop_missing("shop"), "shop", "year", "amount", fill=0.0)
print(wide)
print("---")
print(stack(wide, value_columns=["2023", "2024"], variable_name="year", value_name="amount"))
