"""
GraphQL documents for the Shopify Admin API.

Page sizes are passed as variables so settings control them.
"""

PRODUCTS_WITH_VARIANTS_QUERY = """
query getProductsWithVariants($cursor: String, $first: Int!, $variantsFirst: Int!, $withFulfilFrom: Boolean!, $namespace: String!, $key: String!) {
  products(first: $first, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        title
        status
        totalInventory
        images(first: 1) {
          nodes {
            url
          }
        }
        variants(first: $variantsFirst) {
          edges {
            node {
              id
              sku
              barcode
              title
              inventoryQuantity
              price
              metafield(namespace: $namespace, key: $key) @include(if: $withFulfilFrom) {
                value
              }
            }
          }
        }
      }
    }
  }
}
"""

VARIANTS_SEARCH_QUERY = """
query searchVariants($query: String!, $cursor: String, $first: Int!) {
  productVariants(first: $first, query: $query, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        sku
        barcode
        title
        inventoryQuantity
        price
        product {
          id
          title
          status
        }
      }
    }
  }
}
"""

VARIANTS_BY_ID_QUERY = """
query variantsById($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on ProductVariant {
      id
      sku
      barcode
      title
      inventoryQuantity
      price
      product {
        id
        title
        status
      }
    }
  }
}
"""

VARIANTS_BULK_UPDATE_MUTATION = """
mutation bulkUpdateVariants($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {
    productVariants {
      id
      sku
      barcode
    }
    userErrors {
      field
      message
    }
  }
}
"""

VARIANTS_BULK_DELETE_MUTATION = """
mutation bulkDeleteVariants($productId: ID!, $variantsIds: [ID!]!) {
  productVariantsBulkDelete(productId: $productId, variantsIds: $variantsIds) {
    product {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

PRODUCT_DELETE_MUTATION = """
mutation deleteProduct($input: ProductDeleteInput!) {
  productDelete(input: $input) {
    deletedProductId
    userErrors {
      field
      message
    }
  }
}
"""

METAFIELDS_SET_MUTATION = """
mutation metafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields {
      id
      namespace
      key
      value
    }
    userErrors {
      field
      message
    }
  }
}
"""

ORDERS_QUERY = """
query getOrdersForTopSellers($cursor: String, $query: String, $first: Int!) {
  orders(first: $first, after: $cursor, sortKey: PROCESSED_AT, reverse: true, query: $query) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        name
        processedAt
        lineItems(first: 50) {
          edges {
            node {
              id
              quantity
              name
              sku
              product {
                id
                title
                totalInventory
                images(first: 1) {
                  nodes {
                    url
                  }
                }
                collections(first: 3) {
                  edges {
                    node {
                      title
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

COLLECTIONS_QUERY = """
query getCollections($cursor: String) {
  collections(first: 250, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        title
      }
    }
  }
}
"""

COLLECTION_PRODUCTS_QUERY = """
query getCollectionProducts($id: ID!, $cursor: String) {
  collection(id: $id) {
    id
    title
    products(first: 250, after: $cursor) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        node {
          id
        }
      }
    }
  }
}
"""

COLLECTION_ADD_PRODUCTS_MUTATION = """
mutation addProductsToCollection($id: ID!, $productIds: [ID!]!) {
  collectionAddProducts(id: $id, productIds: $productIds) {
    collection {
      id
      title
    }
    userErrors {
      field
      message
    }
  }
}
"""

COLLECTION_REMOVE_PRODUCTS_MUTATION = """
mutation removeProductsFromCollection($id: ID!, $productIds: [ID!]!) {
  collectionRemoveProducts(id: $id, productIds: $productIds) {
    job {
      id
    }
    userErrors {
      field
      message
    }
  }
}
"""

SHOP_QUERY = """
query shopInfo {
  shop {
    name
    myshopifyDomain
  }
}
"""
