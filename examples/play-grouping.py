from memtable import (
    MeanAggregation,
    RowCountAggregation,
    SumAggregation,
    combine,
    group_by,
    transform,
)
from memtable.interop import read_csv

sales = read_csv("data/sales.csv")
sales["Total"] = [q * p for q, p in zip(sales["Quantity"], sales["Price"])]

groups = group_by(sales, "Product", sort=True)
print(
    combine(
        groups,
        {
            "orders": RowCountAggregation(),
            "quantity": SumAggregation("Quantity"),
            "revenue": SumAggregation("Total"),
        },
    )
)

print("---")
print(transform(groups, {"avg_price": MeanAggregation("Price")}).head(10))
