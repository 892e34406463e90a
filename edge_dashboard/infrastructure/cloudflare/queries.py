"""GraphQL documents sent to the Cloudflare analytics endpoint."""

ZONE_DAILY = """
query($zone: String!, $since: Date!, $until: Date!) {
  viewer {
    zones(filter: {zoneTag: $zone}) {
      httpRequests1dGroups(
        filter: {date_geq: $since, date_leq: $until}
        limit: 100
        orderBy: [date_DESC]
      ) {
        dimensions { date }
        sum { requests bytes threats cachedRequests cachedBytes }
      }
    }
  }
}"""

ZONE_HOURLY = """
query($zone: String!, $since: Time!, $until: Time!) {
  viewer {
    zones(filter: {zoneTag: $zone}) {
      httpRequests1hGroups(
        filter: {datetime_geq: $since, datetime_leq: $until}
        limit: 200
        orderBy: [datetime_DESC]
      ) {
        dimensions { datetime }
        sum { requests bytes threats cachedRequests cachedBytes }
      }
    }
  }
}"""

ZONE_GEOGRAPHY = """
query($zone: String!, $since: Date!, $until: Date!) {
  viewer {
    zones(filter: {zoneTag: $zone}) {
      httpRequests1dGroups(
        filter: {date_geq: $since, date_leq: $until}
        limit: 100
        orderBy: [date_DESC]
      ) {
        dimensions { date }
        sum {
          countryMap { bytes requests threats clientCountryName }
        }
      }
    }
  }
}"""

WORKERS_INVOCATIONS = """
query GetWorkersAnalytics($accountTag: String!, $datetimeStart: Time!, $datetimeEnd: Time!) {
  viewer {
    accounts(filter: {accountTag: $accountTag}) {
      workersInvocationsAdaptive(
        limit: 1000,
        filter: {
          datetime_geq: $datetimeStart,
          datetime_leq: $datetimeEnd
        }
      ) {
        sum { subrequests requests errors }
        quantiles { cpuTimeP50 cpuTimeP99 }
        dimensions { scriptName }
      }
    }
  }
}"""
